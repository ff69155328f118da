"""The document node of an environment."""

from __future__ import annotations

import logging
from http.cookiejar import CookieJar

from .constants import HTML_NAMESPACE
from .node import Comment, DocumentFragment, Node, Text, create_element
from .urls import parse_url

logger = logging.getLogger(__name__)


class Document(Node):
    __slots__ = (
        "_cookie_jar",
        "_features",
        "_origin",
        "_url",
        "character_set",
        "content_type",
        "default_view",
        "include_node_locations",
        "parsing_mode",
        "ready_state",
        "referrer",
    )

    def __init__(
        self,
        *,
        url="about:blank",
        referrer="",
        content_type="text/html",
        parsing_mode="html",
        character_set="UTF-8",
        include_node_locations=False,
        cookie_jar=None,
        default_view=None,
    ):
        super().__init__("#document")
        parsed = parse_url(url)
        if parsed is None:
            msg = f'Could not parse "{url}" as a URL'
            raise TypeError(msg)
        self._url = parsed
        self._origin = parsed.origin
        self.referrer = referrer
        self.content_type = content_type
        self.parsing_mode = parsing_mode
        self.character_set = character_set
        self.include_node_locations = include_node_locations
        self._cookie_jar = cookie_jar
        self._features = frozenset()
        self.default_view = default_view
        self.ready_state = "loading"

    # -- URL and origin ---------------------------------------------------

    @property
    def url(self):
        return self._url.href

    @property
    def origin(self):
        return self._origin

    def set_url(self, url_record):
        self._url = url_record
        self._origin = url_record.origin

    @property
    def url_record(self):
        return self._url

    # -- collaborators ------------------------------------------------------

    @property
    def cookie_jar(self):
        if self._cookie_jar is None:
            self._cookie_jar = CookieJar()
        return self._cookie_jar

    def apply_features(self, features):
        """Set which element categories may fetch external resources."""
        self._features = frozenset(features)

    def can_fetch(self, tag_name):
        return tag_name.lower() in self._features

    @property
    def features(self):
        return self._features

    # -- tree accessors -----------------------------------------------------

    @property
    def doctype(self):
        for child in self.children:
            if child.tag_name == "!doctype":
                return child
        return None

    @property
    def document_element(self):
        for child in self.children:
            if child.is_element:
                return child
        return None

    @property
    def head(self):
        root = self.document_element
        if root is None or root.tag_name != "html":
            return None
        return root.find_child_by_tag("head")

    @property
    def body(self):
        root = self.document_element
        if root is None or root.tag_name != "html":
            return None
        for child in root.children:
            if child.tag_name in ("body", "frameset"):
                return child
        return None

    @property
    def title(self):
        for node in self.iter_descendants():
            if node.tag_name == "title":
                return " ".join(node.text_content.split())
        return ""

    def get_element_by_id(self, element_id):
        for node in self.iter_descendants():
            if node.is_element and node.attributes.get("id") == element_id:
                return node
        return None

    # -- factories ------------------------------------------------------------

    def create_element(self, tag_name, namespace=HTML_NAMESPACE):
        if self.parsing_mode == "html" and namespace == HTML_NAMESPACE:
            tag_name = tag_name.lower()
        return create_element(tag_name, namespace=namespace, owner_document=self)

    def create_text_node(self, data):
        return Text(str(data), owner_document=self)

    def create_comment(self, data):
        return Comment(str(data), owner_document=self)

    def create_document_fragment(self):
        return DocumentFragment(owner_document=self)

    # -- loading --------------------------------------------------------------

    def close(self):
        """Mark the document as fully loaded and fire the window's load event."""
        if self.ready_state == "complete":
            return
        self.ready_state = "complete"
        logger.debug("document %s loaded", self.url)
        if self.default_view is not None:
            self.default_view.dispatch_event("load")

    @property
    def text_content(self):
        return None

    def __repr__(self):
        return f"<Document url={self.url!r} mode={self.parsing_mode}>"
