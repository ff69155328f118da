"""Tests for the construction sequence of a document environment."""

import unittest

from turbodom import TurboDOM, VirtualConsole
from turbodom.encoding import DecodedMarkup
from turbodom.environment import bootstrap, build_feature_table
from turbodom.errors import ConstructionError
from turbodom.options import normalize_options


class TestFeatureTable(unittest.TestCase):
    def test_disabled_by_default(self):
        assert build_feature_table(None, None) == frozenset()

    def test_scripts_alone_fetch_nothing(self):
        assert build_feature_table(None, "dangerously") == frozenset()

    def test_usable_resources(self):
        assert build_feature_table("usable", None) == {"link", "img", "frame", "iframe"}
        assert build_feature_table("usable", "outside-only") == {"link", "img", "frame", "iframe"}

    def test_usable_resources_with_scripts(self):
        assert build_feature_table("usable", "dangerously") == {"link", "img", "frame", "iframe", "script"}

    def test_document_uses_table(self):
        document = TurboDOM(resources="usable").window.document
        assert document.can_fetch("IMG")
        assert not document.can_fetch("script")
        assert not TurboDOM().window.document.can_fetch("img")


class TestBootstrap(unittest.TestCase):
    def test_order(self):
        observed = {}

        def before_parse(window):
            document = window.document
            observed["children"] = list(document.children)
            observed["ready_state"] = document.ready_state
            observed["features"] = document.features
            observed["encoding"] = document.character_set
            window.add_event_listener("load", lambda event: observed.setdefault("loaded", document.body.inner_html))

        settings = normalize_options({"before_parse": before_parse, "resources": "usable"})
        window = bootstrap(DecodedMarkup("<p>hi</p>", "ISO-8859-2"), settings)

        assert observed["children"] == []
        assert observed["ready_state"] == "loading"
        assert "img" in observed["features"]
        assert observed["encoding"] == "ISO-8859-2"
        assert observed["loaded"] == "<p>hi</p>"
        assert window.document.ready_state == "complete"

    def test_before_parse_receives_global_proxy(self):
        received = []
        dom = TurboDOM(before_parse=received.append)
        assert received == [dom.window]
        assert received[0] is dom.window

    def test_before_parse_can_add_globals(self):
        def before_parse(window):
            window.answer = 42

        dom = TurboDOM(before_parse=before_parse)
        assert dom.window.answer == 42

    def test_before_parse_exception_propagates(self):
        class Boom(Exception):
            pass

        def before_parse(window):
            raise Boom("stop")

        with self.assertRaises(Boom):
            TurboDOM("<p>x</p>", before_parse=before_parse)

    def test_malformed_xml(self):
        with self.assertRaises(ConstructionError):
            TurboDOM("<root><a></root>", content_type="application/xml")

    def test_empty_xml(self):
        dom = TurboDOM(content_type="text/xml")
        assert dom.window.document.children == []
        assert dom.serialize() == ""

    def test_window_settings(self):
        dom = TurboDOM(
            url="https://example.com:8080/path/page?x=1#top",
            referrer="https://referrer.example/",
            user_agent="TestAgent/1.0",
            virtual_console=VirtualConsole(),
        )
        window = dom.window
        assert window.navigator.user_agent == "TestAgent/1.0"
        assert window.document.referrer == "https://referrer.example/"
        assert window.location.href == "https://example.com:8080/path/page?x=1#top"
        assert window.location.origin == "https://example.com:8080"
        assert window.location.protocol == "https:"
        assert window.location.host == "example.com:8080"
        assert window.location.hostname == "example.com"
        assert window.location.port == "8080"
        assert window.location.pathname == "/path/page"
        assert window.location.search == "?x=1"
        assert window.location.hash == "#top"

    def test_removed_load_listener_does_not_run(self):
        calls = []

        def listener(event):
            calls.append(event)

        def before_parse(window):
            window.add_event_listener("load", listener)
            window.add_event_listener("load", listener)
            window.remove_event_listener("load", listener)

        TurboDOM(before_parse=before_parse)
        assert calls == []

    def test_window_identity(self):
        window = TurboDOM().window
        assert window.top is window
        assert window.self is window
        assert window.window is window
        assert window.document.default_view is window


if __name__ == "__main__":
    unittest.main()
