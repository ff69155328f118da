import unittest

from turbodom.urls import parse_url, serialize_origin, serialize_url


class TestParseUrl(unittest.TestCase):
    def test_about_blank(self):
        url = parse_url("about:blank")
        assert url.scheme == "about"
        assert url.host is None
        assert url.href == "about:blank"
        assert url.origin == "null"

    def test_special_url_is_canonicalized(self):
        url = parse_url("HTTP://User:pw@Example.COM:80/a b?q=1 2#frag")
        assert url.host == "example.com"
        assert url.port is None
        assert url.href == "http://User:pw@example.com/a%20b?q=1%202#frag"

    def test_non_default_port(self):
        url = parse_url("https://example.com:8443")
        assert url.port == 8443
        assert url.href == "https://example.com:8443/"
        assert url.origin == "https://example.com:8443"

    def test_backslashes_in_special_urls(self):
        assert parse_url("https:\\\\example.com\\a").href == "https://example.com/a"

    def test_idna_host(self):
        assert parse_url("http://bücher.example/").host == "xn--bcher-kva.example"

    def test_empty_query_and_fragment_are_kept(self):
        assert parse_url("http://example.com/?#").href == "http://example.com/?#"

    def test_file_url(self):
        url = parse_url("file:///tmp/page.html")
        assert url.href == "file:///tmp/page.html"
        assert url.origin == "null"

    def test_opaque_path(self):
        url = parse_url("mailto:someone@example.com")
        assert url.href == "mailto:someone@example.com"
        assert url.origin == "null"

    def test_dot_segments_are_removed(self):
        assert parse_url("https://example.com/a/../b/./c").href == "https://example.com/b/c"
        assert parse_url("https://example.com/a/%2E%2e/b/%2e").href == "https://example.com/b/"
        assert parse_url("http://example.com/a/b/..").href == "http://example.com/a/"
        assert parse_url("http://example.com/../../x").href == "http://example.com/x"
        assert parse_url("foo://host/a/./b/../c").href == "foo://host/a/c"

    def test_component_encode_sets(self):
        assert parse_url("https://example.com/a|b^c").path == "/a|b^c"
        assert parse_url("https://example.com/{x}`").path == "/%7Bx%7D%60"
        assert parse_url("https://example.com/café").path == "/caf%C3%A9"
        assert parse_url("https://example.com/?a='b'").query == "a=%27b%27"
        assert parse_url("foo://host/?a='b'").query == "a='b'"
        assert parse_url("https://example.com/#a b`c{d}").fragment == "a%20b%60c{d}"
        assert parse_url("https://example.com/a%2Fb").path == "/a%2Fb"

    def test_opaque_path_keeps_printable_characters(self):
        assert parse_url("data:text/html,<p>hi there</p>").href == "data:text/html,<p>hi there</p>"
        assert parse_url("mailto:a@example.com?subject=a b").href == "mailto:a@example.com?subject=a%20b"

    def test_rejected(self):
        for value in (
            "",
            "not a url",
            "/relative/path",
            "//example.com/",
            "http://",
            "http:example.com",
            "http://exa mple.com/",
            "http://example.com:99999/",
            "http://example.com:port/",
        ):
            assert parse_url(value) is None, value

    def test_surrounding_whitespace_is_stripped(self):
        assert parse_url("  https://example.com/\n").href == "https://example.com/"


class TestSerialize(unittest.TestCase):
    def test_exclude_fragment(self):
        url = parse_url("https://example.com/p?q#f")
        assert serialize_url(url, exclude_fragment=True) == "https://example.com/p?q"

    def test_origin(self):
        assert serialize_origin(parse_url("wss://example.com:443/socket")) == "wss://example.com"
        assert serialize_origin(parse_url("blob:https://example.com/uuid")) == "https://example.com"
        assert serialize_origin(parse_url("data:text/html,hi")) == "null"


if __name__ == "__main__":
    unittest.main()
