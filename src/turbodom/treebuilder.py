"""Markup-to-tree builders.

``HTMLTreeBuilder`` drives the standard library ``html.parser`` tokenizer and
builds turbodom nodes with a permissive, simplified version of the HTML tree
construction rules: implied ``html``/``head``/``body``, void elements,
implied end tags, ``template`` contents and SVG/MathML namespaces. It does not
implement the adoption agency algorithm or foster parenting.

When location tracking is on every node created from the source gets a
:class:`NodeLocation`. Offsets index into the decoded markup; lines and
columns are 1-based.

``XMLTreeBuilder`` uses ``xml.parsers.expat`` and raises
:class:`~turbodom.errors.ConstructionError` for markup that is not
well-formed.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from html import unescape
from html.parser import HTMLParser
from xml.parsers import expat

from .constants import (
    AUTO_CLOSING_TAGS,
    BOUNDARY_ELEMENTS,
    CLOSE_ON_PARENT_CLOSE,
    FOREIGN_ROOTS,
    HEAD_ELEMENTS,
    HEADING_ELEMENTS,
    HTML_NAMESPACE,
    SVG_CASE_SENSITIVE_ELEMENTS,
    SVG_NAMESPACE,
    VOID_ELEMENTS,
)
from .errors import ConstructionError
from .node import Comment, DocumentFragment, DocumentType, Text, create_element

logger = logging.getLogger(__name__)

# Start tag -> open elements it may close, derived from AUTO_CLOSING_TAGS
_CLOSED_BY_START = {}
for _open_tag, _closers in AUTO_CLOSING_TAGS.items():
    for _closer in _closers:
        _CLOSED_BY_START.setdefault(_closer, set()).add(_open_tag)

# Start tag -> ancestors that stop the search for elements to close
_CLOSE_SEARCH_STOPS = {
    start: frozenset(
        stop for target in targets for stop in CLOSE_ON_PARENT_CLOSE.get(target, ())
    )
    for start, targets in _CLOSED_BY_START.items()
}

_SVG_HTML_INTEGRATION_POINTS = frozenset({"foreignObject", "desc", "title"})

# End tags that close an open table cell on their way out
_TABLE_END_TAGS = frozenset({"table", "tbody", "tfoot", "thead", "tr"})
_CELL_ELEMENTS = frozenset({"td", "th"})

# Elements whose text may hold character references but no tags. Newer
# html.parser releases switch into this mode themselves.
_RCDATA_ELEMENTS = frozenset({"textarea", "title"})
_NATIVE_RCDATA = "title" in getattr(HTMLParser, "RCDATA_CONTENT_ELEMENTS", ())

# Fragment contexts whose content is plain text
_TEXT_CONTEXTS = frozenset({
    "iframe",
    "noembed",
    "noframes",
    "plaintext",
    "script",
    "style",
    "textarea",
    "title",
    "xmp",
})

_DOCTYPE_IDS = re.compile(
    r"""^\s*(?P<name>\S+)?\s*(?:(?P<keyword>public|system)\s*(?P<first>"[^"]*"|'[^']*')?\s*(?P<second>"[^"]*"|'[^']*')?)?""",
    re.IGNORECASE,
)

_WHITESPACE = "\t\n\x0c\r "


class NodeLocation:
    """Where a node came from in the decoded source.

    Elements also carry ``start_tag`` and ``end_tag`` (each a
    ``NodeLocation``); ``end_tag`` is None when the end tag was implied or the
    element is void.
    """

    __slots__ = ("col", "end_offset", "end_tag", "line", "start_offset", "start_tag")

    def __init__(self, line, col, start_offset, end_offset=None, start_tag=None, end_tag=None):
        self.line = line
        self.col = col
        self.start_offset = start_offset
        self.end_offset = end_offset
        self.start_tag = start_tag
        self.end_tag = end_tag

    def __repr__(self):
        return (
            f"NodeLocation(line={self.line}, col={self.col}, "
            f"start_offset={self.start_offset}, end_offset={self.end_offset})"
        )

    def __eq__(self, other):
        if not isinstance(other, NodeLocation):
            return NotImplemented
        return (self.line, self.col, self.start_offset, self.end_offset) == (
            other.line,
            other.col,
            other.start_offset,
            other.end_offset,
        )

    __hash__ = None


def _line_starts(text):
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


def _is_all_whitespace(text):
    return text.strip(_WHITESPACE) == ""


class HTMLTreeBuilder(HTMLParser):
    """Build a document (or a fragment) from HTML markup."""

    def __init__(self, document, *, fragment=None, context=None, track_locations=False):
        super().__init__(convert_charrefs=True)
        self.document = document
        self.fragment = fragment
        self.context = context
        self.track_locations = bool(track_locations) and fragment is None
        self.open_elements = []
        self.html_element = None
        self.head_element = None
        self.body_element = None
        self._line_starts = [0]
        # Spans whose end is the start of the next token
        self._unsettled = []
        self._tracked_elements = []

    # -- driver -----------------------------------------------------------------

    def run(self, markup):
        if self.track_locations:
            self._line_starts = _line_starts(markup)
        self.feed(markup)
        self.close()
        self._settle(len(markup))
        self.finish()
        return self.fragment if self.fragment is not None else self.document

    def finish(self):
        if self.fragment is None:
            self._ensure_body()
        self.open_elements.clear()
        if self.track_locations:
            self._finalize_locations()

    # -- location bookkeeping ---------------------------------------------------

    def _offset(self):
        line, col = self.getpos()
        return self._line_starts[line - 1] + col

    def _span(self):
        """Open a span at the current token; its end is settled by the next token."""
        line, col = self.getpos()
        offset = self._line_starts[line - 1] + col
        self._settle(offset)
        span = NodeLocation(line, col + 1, offset)
        self._unsettled.append(span)
        return span

    def _settle(self, offset):
        if not self._unsettled:
            return
        for span in self._unsettled:
            span.end_offset = offset
        self._unsettled.clear()

    def _finalize_locations(self):
        # Children are created after their parents, so walk backwards
        for element in reversed(self._tracked_elements):
            location = element.location
            if location.end_tag is not None:
                location.end_offset = location.end_tag.end_offset
                continue
            end = location.start_tag.end_offset
            for child in reversed(element.children):
                if child.location is not None and child.location.end_offset is not None:
                    end = max(end, child.location.end_offset)
                    break
            location.end_offset = end

    def _split_span(self, span, length):
        """Split an unsettled span after `length` characters."""
        offset = span.start_offset + length
        span.end_offset = offset
        self._unsettled = [pending for pending in self._unsettled if pending is not span]
        line = bisect_right(self._line_starts, offset)
        rest = NodeLocation(line, offset - self._line_starts[line - 1] + 1, offset)
        self._unsettled.append(rest)
        return span, rest

    def _locate_start_tag(self, element):
        if not self.track_locations:
            return
        line, col = self.getpos()
        offset = self._line_starts[line - 1] + col
        self._settle(offset)
        raw = self.get_starttag_text() or ""
        start_tag = NodeLocation(line, col + 1, offset, offset + len(raw))
        element.location = NodeLocation(line, col + 1, offset, start_tag=start_tag)
        self._tracked_elements.append(element)

    # -- tree helpers -------------------------------------------------------------

    @property
    def root(self):
        return self.fragment if self.fragment is not None else self.document

    def _current_node(self):
        if self.open_elements:
            return self.open_elements[-1]
        return None

    def _insertion_parent(self):
        node = self._current_node()
        if node is None:
            if self.fragment is None and self.html_element is not None:
                return self.html_element
            return self.root
        content = getattr(node, "content", None)
        return content if content is not None else node

    def _namespace_parent(self):
        node = self._current_node()
        if node is None:
            return self.context
        return node

    def _create(self, name, attrs, namespace=HTML_NAMESPACE):
        attributes = {}
        for key, value in attrs:
            if key not in attributes:
                attributes[key] = value if value is not None else ""
        return create_element(name, attributes, namespace=namespace, owner_document=self.document)

    def _insert_element(self, element, push=True):
        self._insertion_parent().append_child(element)
        if push:
            self.open_elements.append(element)
        return element

    def _pop_until(self, element):
        while self.open_elements:
            popped = self.open_elements.pop()
            if popped is element:
                return

    def _append_text(self, data, span=None):
        parent = self._insertion_parent()
        last = parent.last_child
        if last is not None and last.tag_name == "#text":
            last.data += data
            if span is not None and last.location is not None:
                last.location.end_offset = span.end_offset
                self._unsettled = [pending for pending in self._unsettled if pending is not span]
                if span.end_offset is None:
                    self._unsettled.append(last.location)
            return
        node = Text(data, owner_document=self.document)
        node.location = span
        parent.append_child(node)

    # -- implied structure (document parsing only) ---------------------------------

    def _ensure_html(self):
        if self.html_element is None:
            self.html_element = create_element("html", owner_document=self.document)
            self.document.append_child(self.html_element)
            self.open_elements.insert(0, self.html_element)
        return self.html_element

    def _ensure_head(self):
        self._ensure_html()
        if self.head_element is None:
            self.head_element = create_element("head", owner_document=self.document)
            self.html_element.append_child(self.head_element)
            self.open_elements.append(self.head_element)
        return self.head_element

    def _close_head(self):
        if self.head_element is not None and self.head_element in self.open_elements:
            self._pop_until(self.head_element)

    def _ensure_body(self, attrs=None, name="body"):
        if self.fragment is not None:
            return None
        if self.body_element is None:
            self._ensure_head()
            self._close_head()
            if self.html_element not in self.open_elements:
                self.open_elements.insert(0, self.html_element)
            self.body_element = self._create(name, attrs or ())
            self.html_element.append_child(self.body_element)
            self.open_elements.append(self.body_element)
        return self.body_element

    def _in_head_phase(self):
        if self.fragment is not None or self.body_element is not None:
            return False
        return not any(node.tag_name == "template" for node in self.open_elements)

    # -- html.parser callbacks ----------------------------------------------------

    def handle_starttag(self, tag, attrs):
        self._start_tag(tag, attrs, self_closing=False)

    def handle_startendtag(self, tag, attrs):
        self._start_tag(tag, attrs, self_closing=True)

    def _start_tag(self, tag, attrs, self_closing):
        namespace = self._namespace_for(tag)
        if namespace != HTML_NAMESPACE:
            self._foreign_start_tag(tag, attrs, namespace, self_closing)
            return

        if tag == "html":
            created = self.fragment is None and self.html_element is None
            if self.fragment is None:
                self._merge_attributes(self._ensure_html(), attrs)
            if created:
                self._locate_start_tag(self.html_element)
            elif self.track_locations:
                self._settle(self._offset())
            return

        if tag in ("head", "body", "frameset"):
            created = None
            if self.fragment is None:
                if tag == "head" and self.head_element is None:
                    created = self._ensure_head()
                    self._merge_attributes(created, attrs)
                elif tag != "head" and self.body_element is None:
                    created = self._ensure_body(attrs, name=tag)
                elif tag == "body":
                    self._merge_attributes(self.body_element, attrs)
            if created is not None:
                self._locate_start_tag(created)
            elif self.track_locations:
                self._settle(self._offset())
            return

        if tag in HEAD_ELEMENTS and self._in_head_phase():
            head = self._ensure_head()
            element = self._create(tag, attrs)
            self._locate_start_tag(element)
            if self._current_node() is head or head not in self.open_elements:
                self._append_in_head(head, element)
            else:
                self._insert_element(element, push=tag not in VOID_ELEMENTS)
            self._enter_rcdata(tag, self_closing)
            return

        if self._in_head_phase():
            self._ensure_body()

        self._close_implied(tag)

        element = self._create(tag, attrs)
        self._locate_start_tag(element)
        self._insert_element(element, push=tag not in VOID_ELEMENTS)
        self._enter_rcdata(tag, self_closing)

    def _enter_rcdata(self, tag, self_closing):
        if tag in _RCDATA_ELEMENTS and not self_closing and not _NATIVE_RCDATA:
            self.set_cdata_mode(tag)

    def _append_in_head(self, head, element):
        if head in self.open_elements:
            self._insert_element(element, push=element.tag_name not in VOID_ELEMENTS)
            return
        # after </head>: the element still belongs to head
        head.append_child(element)
        if element.tag_name not in VOID_ELEMENTS:
            self.open_elements.append(element)

    def _foreign_start_tag(self, tag, attrs, namespace, self_closing):
        if self._in_head_phase():
            self._ensure_body()
        if namespace == SVG_NAMESPACE:
            tag = SVG_CASE_SENSITIVE_ELEMENTS.get(tag, tag)
        element = self._create(tag, attrs, namespace=namespace)
        self._locate_start_tag(element)
        self._insert_element(element, push=not self_closing)

    def _namespace_for(self, tag):
        if tag in FOREIGN_ROOTS:
            parent = self._namespace_parent()
            if parent is None or parent.namespace == HTML_NAMESPACE or self._is_integration_point(parent):
                return FOREIGN_ROOTS[tag]
        parent = self._namespace_parent()
        if parent is None or parent.namespace in (None, HTML_NAMESPACE) or self._is_integration_point(parent):
            return HTML_NAMESPACE
        return parent.namespace

    def _is_integration_point(self, node):
        return node.namespace == SVG_NAMESPACE and node.tag_name in _SVG_HTML_INTEGRATION_POINTS

    def _close_implied(self, tag):
        stack = self.open_elements
        if tag in HEADING_ELEMENTS and stack and stack[-1].tag_name in HEADING_ELEMENTS:
            stack.pop()

        targets = _CLOSED_BY_START.get(tag)
        if not targets:
            return
        stops = _CLOSE_SEARCH_STOPS.get(tag, frozenset())
        index = len(stack) - 1
        while index >= 0:
            node = stack[index]
            if node.namespace != HTML_NAMESPACE:
                break
            if node.tag_name in targets:
                del stack[index:]
            elif node.tag_name in BOUNDARY_ELEMENTS or node.tag_name in stops or node.tag_name == "button":
                break
            index -= 1

    def _merge_attributes(self, element, attrs):
        for key, value in attrs:
            if key not in element.attributes:
                element.attributes[key] = value if value is not None else ""

    def handle_endtag(self, tag):
        span = self._span() if self.track_locations else None

        if tag in ("html", "body"):
            element = self.html_element if tag == "html" else self.body_element
            if element is not None and element.location is not None and element.location.end_tag is None:
                element.location.end_tag = span
            return
        if tag == "head":
            if self.fragment is None and self.head_element in self.open_elements:
                if self.head_element.location is not None:
                    self.head_element.location.end_tag = span
                self._pop_until(self.head_element)
            return
        if tag == "br":
            if self._in_head_phase():
                self._ensure_body()
            self._insert_element(self._create("br", ()), push=False)
            return

        stack = self.open_elements
        for index in range(len(stack) - 1, -1, -1):
            node = stack[index]
            if node.tag_name == tag or (node.namespace != HTML_NAMESPACE and node.tag_name.lower() == tag):
                if node.location is not None:
                    node.location.end_tag = span
                del stack[index:]
                return
            if node.namespace != HTML_NAMESPACE:
                continue
            if tag in _TABLE_END_TAGS and node.tag_name in _CELL_ELEMENTS:
                continue
            if node.tag_name in BOUNDARY_ELEMENTS:
                break

        if tag == "p":
            # </p> without an open <p> produces an empty paragraph
            if self._in_head_phase():
                self._ensure_body()
            self._insert_element(self._create("p", ()), push=False)

    def handle_data(self, data):
        span = self._span() if self.track_locations else None
        if not data:
            return
        if self.cdata_elem in _RCDATA_ELEMENTS and not _NATIVE_RCDATA:
            data = unescape(data)

        if self._in_head_phase():
            current = self._current_node()
            inside_element = current is not None and current not in (self.html_element, self.head_element)
            if not inside_element:
                stripped = data.lstrip(_WHITESPACE)
                leading = data[: len(data) - len(stripped)]
                leading_span = None
                if span is not None and leading:
                    leading_span, span = self._split_span(span, len(leading))
                if leading and self.html_element is not None:
                    self._append_text(leading, leading_span)
                if not stripped:
                    return
                self._ensure_body()
                data = stripped

        self._append_text(data, span)

    def handle_comment(self, data):
        span = self._span() if self.track_locations else None
        node = Comment(data, owner_document=self.document)
        node.location = span
        self._insertion_parent().append_child(node)

    def handle_decl(self, decl):
        span = self._span() if self.track_locations else None
        if not decl.lower().startswith("doctype"):
            self.handle_comment(decl)
            return
        if self.fragment is not None or self.html_element is not None or self.document.doctype is not None:
            return
        match = _DOCTYPE_IDS.match(decl[7:])
        name = (match.group("name") or "").lower()
        public_id = system_id = ""
        keyword = (match.group("keyword") or "").lower()
        first = (match.group("first") or "")[1:-1]
        second = (match.group("second") or "")[1:-1]
        if keyword == "public":
            public_id, system_id = first, second
        elif keyword == "system":
            system_id = first
        doctype = DocumentType(name, public_id, system_id, owner_document=self.document)
        doctype.location = span
        self.document.append_child(doctype)

    def unknown_decl(self, data):
        current = self._namespace_parent()
        if data.startswith("CDATA[") and current is not None and current.namespace != HTML_NAMESPACE:
            self.handle_data(data[6:])
            return
        self.handle_comment(f"[{data}]")

    def handle_pi(self, data):
        self.handle_comment("?" + data)


class XMLTreeBuilder:
    """Build a document (or a fragment) from XML markup with expat."""

    def __init__(self, document, *, fragment=None, context=None):
        self.document = document
        self.fragment = fragment
        self.context = context
        self.open_elements = []
        self.namespaces = [{"xml": "http://www.w3.org/XML/1998/namespace"}]

    @property
    def root(self):
        return self.fragment if self.fragment is not None else self.document

    def run(self, markup):
        if self.fragment is None and _is_all_whitespace(markup):
            return self.document

        parser = expat.ParserCreate()
        parser.buffer_text = True
        parser.StartElementHandler = self.start_element
        parser.EndElementHandler = self.end_element
        parser.CharacterDataHandler = self.character_data
        parser.CommentHandler = self.comment
        parser.StartDoctypeDeclHandler = self.doctype

        if self.fragment is not None:
            default_ns = HTML_NAMESPACE if self.context is None else (self.context.namespace or "")
            markup = f'<turbodom-fragment xmlns="{default_ns}">{markup}</turbodom-fragment>'
        try:
            parser.Parse(markup, True)
        except expat.ExpatError as exc:
            msg = f"Could not parse the given markup as XML: {exc}"
            raise ConstructionError(msg) from exc
        return self.root

    def _parent(self):
        if self.open_elements:
            return self.open_elements[-1]
        return self.root

    def start_element(self, name, attrs):
        if self.fragment is not None and not self.open_elements and name == "turbodom-fragment":
            self.open_elements.append(self.fragment)
            self.namespaces.append(dict(self.namespaces[-1], **{"": attrs.get("xmlns", "")}))
            return

        scope = dict(self.namespaces[-1])
        for key, value in attrs.items():
            if key == "xmlns":
                scope[""] = value
            elif key.startswith("xmlns:"):
                scope[key[6:]] = value
        self.namespaces.append(scope)

        prefix = name.split(":", 1)[0] if ":" in name else ""
        namespace = scope.get(prefix) or None
        element = create_element(name, attrs, namespace=namespace, owner_document=self.document)
        content = getattr(self._parent(), "content", None)
        (content if content is not None else self._parent()).append_child(element)
        self.open_elements.append(element)

    def end_element(self, name):
        self.open_elements.pop()
        self.namespaces.pop()

    def character_data(self, data):
        parent = self._parent()
        if parent is self.document:
            return
        content = getattr(parent, "content", None)
        target = content if content is not None else parent
        last = target.last_child
        if last is not None and last.tag_name == "#text":
            last.data += data
        else:
            target.append_child(Text(data, owner_document=self.document))

    def comment(self, data):
        self._parent().append_child(Comment(data, owner_document=self.document))

    def doctype(self, name, system_id, public_id, has_internal_subset):
        self.document.append_child(DocumentType(name, public_id or "", system_id or "", owner_document=self.document))


def parse_document(document, markup):
    """Append the tree for ``markup`` to an empty ``document``."""
    if document.parsing_mode == "xml":
        builder = XMLTreeBuilder(document)
    else:
        builder = HTMLTreeBuilder(document, track_locations=document.include_node_locations)
    builder.run(markup)
    logger.debug("parsed %d characters into %r", len(markup), document)
    return document


def parse_fragment(markup, context=None, owner_document=None):
    """Parse ``markup`` as the children of ``context`` into a new fragment."""
    markup = "" if markup is None else str(markup)
    fragment = DocumentFragment(owner_document=owner_document)
    if (
        context is not None
        and context.namespace == HTML_NAMESPACE
        and context.tag_name in _TEXT_CONTEXTS
    ):
        if markup:
            fragment.append_child(Text(markup, owner_document=owner_document))
        return fragment

    if owner_document is not None and owner_document.parsing_mode == "xml":
        XMLTreeBuilder(owner_document, fragment=fragment, context=context).run(markup)
        return fragment

    HTMLTreeBuilder(owner_document, fragment=fragment, context=context).run(markup)
    return fragment
