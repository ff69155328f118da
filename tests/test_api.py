"""Tests for the TurboDOM handle."""

import inspect
import tempfile
import unittest
from http.cookiejar import CookieJar
from pathlib import Path

from turbodom import NodeLocation, Options, TurboDOM
from turbodom.errors import OptionRangeError, OptionTypeError, UsageError


class TestConstruction(unittest.TestCase):
    def test_empty(self):
        dom = TurboDOM()
        assert dom.serialize() == "<html><head></head><body></body></html>"
        document = dom.window.document
        assert document.url == "about:blank"
        assert document.content_type == "text/html"
        assert document.character_set == "UTF-8"
        assert document.ready_state == "complete"

    def test_serialize(self):
        dom = TurboDOM("<!DOCTYPE html><title>T</title><p>Hello <b>world</b></p>")
        assert dom.serialize() == (
            "<!DOCTYPE html><html><head><title>T</title></head>"
            "<body><p>Hello <b>world</b></p></body></html>"
        )
        assert dom.window.document.title == "T"

    def test_bytes_input(self):
        dom = TurboDOM(b"<p>caf\xe9</p>")
        assert dom.window.document.character_set == "windows-1252"
        assert dom.window.document.body.text_content == "café"

    def test_options_object(self):
        dom = TurboDOM("<p>x</p>", options=Options(url="https://example.com/", user_agent="UA"))
        assert dom.window.location.href == "https://example.com/"
        assert dom.window.navigator.user_agent == "UA"

    def test_keywords_override_options_object(self):
        dom = TurboDOM(options={"url": "https://a.example/"}, url="https://b.example/")
        assert dom.window.document.url == "https://b.example/"

    def test_node_locations_default_to_off(self):
        assert inspect.signature(TurboDOM).parameters["include_node_locations"].default is False
        dom = TurboDOM("<p>x</p>", include_node_locations=False)
        assert dom.window.document.include_node_locations is False
        tracked = TurboDOM("<p>x</p>", options=Options(include_node_locations=True))
        assert tracked.window.document.include_node_locations is True
        assert tracked.node_location(tracked.window.document.body.first_child) is not None

    def test_invalid_option_builds_nothing(self):
        with self.assertRaises(OptionRangeError):
            TurboDOM("<p>x</p>", content_type="text/plain")

    def test_xml_document(self):
        dom = TurboDOM('<root xmlns="urn:x"><item a="1"/><item>two</item></root>', content_type="text/xml")
        document = dom.window.document
        assert document.parsing_mode == "xml"
        assert document.document_element.tag_name == "root"
        assert document.document_element.namespace == "urn:x"
        assert dom.serialize() == '<root xmlns="urn:x"><item a="1"/><item>two</item></root>'

    def test_repr(self):
        assert repr(TurboDOM(url="https://example.com")) == "<TurboDOM https://example.com/>"


class TestCookieJar(unittest.TestCase):
    def test_given_jar_is_used(self):
        jar = CookieJar()
        assert TurboDOM(cookie_jar=jar).cookie_jar is jar

    def test_default_jar_is_created_once(self):
        dom = TurboDOM()
        jar = dom.cookie_jar
        assert isinstance(jar, CookieJar)
        assert dom.cookie_jar is jar
        assert dom.window.document.cookie_jar is jar


class TestNodeLocation(unittest.TestCase):
    def test_requires_tracking(self):
        dom = TurboDOM("<p>x</p>")
        with self.assertRaises(UsageError):
            dom.node_location(dom.window.document.body)

    def test_element_location(self):
        dom = TurboDOM("<p>Hi</p>", include_node_locations=True)
        p = dom.window.document.body.first_child
        location = dom.node_location(p)
        assert location == NodeLocation(1, 1, 0, 9)
        assert location.start_tag == NodeLocation(1, 1, 0, 3)
        assert location.end_tag == NodeLocation(1, 6, 5, 9)
        assert dom.node_location(p.first_child) == NodeLocation(1, 4, 3, 5)

    def test_lines_and_columns(self):
        markup = "<div>\n  <span>x</span>\n</div>"
        dom = TurboDOM(markup, include_node_locations=True)
        span = dom.window.document.get_elements_by_tag_name("span")[0]
        location = dom.node_location(span)
        assert (location.line, location.col) == (2, 3)
        assert markup[location.start_offset : location.end_offset] == "<span>x</span>"

    def test_implied_end_tag(self):
        markup = "<ul><li>one<li>two</ul>"
        dom = TurboDOM(markup, include_node_locations=True)
        first, second = dom.window.document.get_elements_by_tag_name("li")
        assert dom.node_location(first).end_tag is None
        assert markup[dom.node_location(first).start_offset : dom.node_location(first).end_offset] == "<li>one"

    def test_implied_elements_have_no_location(self):
        dom = TurboDOM("<p>x</p>", include_node_locations=True)
        assert dom.node_location(dom.window.document.head) is None

    def test_explicit_document_elements(self):
        markup = "<html><head></head><body class=a><p>x</p></body></html>"
        dom = TurboDOM(markup, include_node_locations=True)
        document = dom.window.document

        body = dom.node_location(document.body)
        assert body.start_offset == markup.index("<body")
        assert body.start_tag == NodeLocation(1, 20, 19, 33)
        assert body.end_tag == NodeLocation(1, 42, 41, 48)
        assert markup[body.start_offset : body.end_offset] == "<body class=a><p>x</p></body>"

        head = dom.node_location(document.head)
        assert markup[head.start_offset : head.end_offset] == "<head></head>"

        html = dom.node_location(document.document_element)
        assert (html.start_offset, html.end_offset) == (0, len(markup))

    def test_repeated_body_tag_keeps_first_location(self):
        markup = "<body><p>x</p><body id=y>"
        dom = TurboDOM(markup, include_node_locations=True)
        location = dom.node_location(dom.window.document.body)
        assert location.start_tag == NodeLocation(1, 1, 0, 6)


class TestReconfigure(unittest.TestCase):
    def test_url(self):
        dom = TurboDOM()
        dom.reconfigure({"url": "https://example.test/"})
        assert dom.window.document.url == "https://example.test/"
        assert dom.window.document.origin == "https://example.test"
        assert dom.window.location.href == "https://example.test/"

    def test_url_is_canonicalized(self):
        dom = TurboDOM()
        dom.reconfigure({"url": "https://example.test/x/../y"})
        assert dom.window.document.url == "https://example.test/y"
        assert dom.window.location.pathname == "/y"

    def test_bad_url_changes_nothing(self):
        dom = TurboDOM(url="https://example.com/")
        top = object()
        with self.assertRaises(OptionTypeError) as cm:
            dom.reconfigure({"url": "not a url", "window_top": top})
        assert str(cm.exception) == 'Could not parse "not a url" as a URL'
        assert dom.window.document.url == "https://example.com/"
        assert dom.window.top is dom.window

    def test_window_top(self):
        dom = TurboDOM()
        top = object()
        dom.reconfigure({"window_top": top})
        assert dom.window.top is top
        assert dom.window.document.url == "about:blank"

    def test_other_keys_are_ignored(self):
        dom = TurboDOM()
        dom.reconfigure({"user_agent": "other"})
        assert dom.window.navigator.user_agent != "other"


class TestFromFile(unittest.TestCase):
    def test_html_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "page.html"
            path.write_bytes(b'<meta charset="utf-8"><p>\xc3\xa9</p>')
            dom = TurboDOM.from_file(path)
            document = dom.window.document
            assert document.url == path.resolve().as_uri()
            assert document.character_set == "UTF-8"
            assert document.body.text_content == "é"
            assert document.content_type == "text/html"

    def test_xhtml_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "page.xhtml"
            path.write_text('<html xmlns="http://www.w3.org/1999/xhtml"><body/></html>', encoding="utf-8")
            dom = TurboDOM.from_file(str(path), url="https://example.com/page.xhtml")
            assert dom.window.document.content_type == "application/xhtml+xml"
            assert dom.window.document.url == "https://example.com/page.xhtml"


class TestFromResponse(unittest.TestCase):
    def test_charset_header_is_transport_label(self):
        dom = TurboDOM.from_response(
            b'<meta charset="utf-8"><p>\xe9</p>',
            url="https://example.com/",
            headers={"Content-Type": "text/html; charset=ISO-8859-2"},
        )
        document = dom.window.document
        assert document.character_set == "ISO-8859-2"
        assert document.body.text_content == "é"
        assert document.url == "https://example.com/"

    def test_content_type_header(self):
        dom = TurboDOM.from_response(
            b"<doc/>",
            url="https://example.com/doc.xml",
            headers={"content-type": "application/xml"},
        )
        assert dom.window.document.parsing_mode == "xml"

    def test_explicit_content_type_wins(self):
        dom = TurboDOM.from_response(
            b"<p>x</p>",
            url="https://example.com/",
            headers={"Content-Type": "application/xml"},
            content_type="text/html",
        )
        assert dom.window.document.parsing_mode == "html"

    def test_without_headers(self):
        dom = TurboDOM.from_response(b"<p>\xe9</p>", url="https://example.com/")
        assert dom.window.document.character_set == "windows-1252"


if __name__ == "__main__":
    unittest.main()
