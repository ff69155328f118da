import unittest

from turbodom.mimetype import MIMEType, parse_mime_type


class TestParseMimeType(unittest.TestCase):
    def test_simple(self):
        mime = parse_mime_type("text/html")
        assert mime.type == "text"
        assert mime.subtype == "html"
        assert mime.parameters == {}
        assert mime.is_html()
        assert not mime.is_xml()

    def test_case_and_whitespace(self):
        mime = parse_mime_type("  Application/XHTML+XML ; Charset=UTF-8 ")
        assert mime.essence == "application/xhtml+xml"
        assert mime.parameters == {"charset": "UTF-8"}
        assert mime.is_xml()

    def test_quoted_parameter(self):
        mime = parse_mime_type('text/html;charset="utf-8";foo="a\\"b"')
        assert mime.parameters == {"charset": "utf-8", "foo": 'a"b'}

    def test_first_parameter_wins(self):
        mime = parse_mime_type("text/html;charset=utf-8;charset=koi8-r")
        assert mime.parameters["charset"] == "utf-8"

    def test_invalid(self):
        for value in ("", "text", "/html", "text/", "te xt/html", "text/ht ml"):
            assert parse_mime_type(value) is None, value

    def test_str(self):
        assert str(parse_mime_type('text/html;Charset="utf-8"')) == "text/html;charset=utf-8"
        assert str(MIMEType("text", "plain", {"x": "a b"})) == 'text/plain;x="a b"'

    def test_equality(self):
        assert parse_mime_type("TEXT/XML") == parse_mime_type("text/xml")
        assert parse_mime_type("text/xml") != parse_mime_type("text/xml;a=b")


if __name__ == "__main__":
    unittest.main()
