from __future__ import annotations

from .constants import HTML_NAMESPACE, MATHML_NAMESPACE, SVG_NAMESPACE


class Node:
    """Represents a DOM-like node.
    - tag_name: e.g., 'div', 'p', etc. '#text', '#comment', '!doctype',
      '#document' and '#document-fragment' for the non-element kinds
    - attributes: dict of attributes (elements only)
    - children: list of child Nodes
    - parent: reference to parent Node (or None for a root)
    - next_sibling/previous_sibling: references to adjacent nodes in the tree
    - location: source position recorded by the parser, when asked to
    """

    __slots__ = (
        "attributes",
        "children",
        "data",
        "location",
        "namespace",
        "next_sibling",
        "owner_document",
        "parent",
        "previous_sibling",
        "tag_name",
    )

    def __init__(self, tag_name, attributes=None, data=None, namespace=None, owner_document=None):
        if tag_name is None or tag_name == "":
            msg = "Empty tag_name passed to Node constructor"
            raise ValueError(msg)

        self.tag_name = tag_name
        self.namespace = namespace
        self.attributes = dict(attributes) if attributes else {}
        self.children = []
        self.parent = None
        # Text and comment payload; unused for elements
        self.data = data if data is not None else ""
        self.next_sibling = None
        self.previous_sibling = None
        self.owner_document = owner_document
        self.location = None

    @property
    def is_element(self):
        return not self.tag_name.startswith(("#", "!"))

    @property
    def is_svg(self):
        return self.namespace == SVG_NAMESPACE

    @property
    def is_mathml(self):
        return self.namespace == MATHML_NAMESPACE

    @property
    def first_child(self):
        return self.children[0] if self.children else None

    @property
    def last_child(self):
        return self.children[-1] if self.children else None

    @property
    def text_content(self):
        if self.tag_name in ("#text", "#comment"):
            return self.data
        return "".join(child.text_content for child in self.children if child.tag_name != "#comment")

    def append_child(self, child):
        if self._would_create_circular_reference(child):
            msg = f"Adding {child.tag_name} as child of {self.tag_name} would create circular reference"
            raise ValueError(msg)

        if child.tag_name == "#document-fragment":
            for grandchild in list(child.children):
                self.append_child(grandchild)
            return child

        if child.parent:
            child.parent.remove_child(child)

        if self.children:
            self.children[-1].next_sibling = child
            child.previous_sibling = self.children[-1]
        else:
            child.previous_sibling = None

        child.parent = self
        child.next_sibling = None
        self.children.append(child)
        return child

    def _would_create_circular_reference(self, child):
        """Check if adding child would create a circular reference."""
        current = self
        while current is not None:
            if current is child:
                return True
            current = current.parent
        return False

    def insert_before(self, new_node, reference_node):
        if reference_node is None:
            return self.append_child(new_node)
        if reference_node.parent is not self:
            msg = f"{reference_node!r} is not a child of {self!r}"
            raise ValueError(msg)
        if self._would_create_circular_reference(new_node):
            msg = f"Adding {new_node.tag_name} as child of {self.tag_name} would create circular reference"
            raise ValueError(msg)

        if new_node.tag_name == "#document-fragment":
            for grandchild in list(new_node.children):
                self.insert_before(grandchild, reference_node)
            return new_node

        if new_node.parent:
            new_node.parent.remove_child(new_node)

        idx = self.children.index(reference_node)
        new_node.parent = self
        self.children.insert(idx, new_node)

        new_node.next_sibling = reference_node
        new_node.previous_sibling = reference_node.previous_sibling
        reference_node.previous_sibling = new_node
        if new_node.previous_sibling:
            new_node.previous_sibling.next_sibling = new_node
        return new_node

    def remove_child(self, child):
        """Remove a child node, updating all sibling links."""
        if child.parent is not self:
            msg = f"{child!r} is not a child of {self!r}"
            raise ValueError(msg)

        if child.previous_sibling:
            child.previous_sibling.next_sibling = child.next_sibling
        if child.next_sibling:
            child.next_sibling.previous_sibling = child.previous_sibling

        self.children.remove(child)
        child.parent = None
        child.next_sibling = None
        child.previous_sibling = None
        return child

    def remove_all_children(self):
        for child in list(self.children):
            self.remove_child(child)

    def iter_descendants(self):
        """Yield descendants in tree order (template contents are not entered)."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_elements_by_tag_name(self, tag_name):
        return [
            node
            for node in self.iter_descendants()
            if node.is_element and (tag_name == "*" or node.tag_name == tag_name)
        ]

    def find_child_by_tag(self, tag_name):
        for child in self.children:
            if child.tag_name == tag_name:
                return child
        return None

    def __repr__(self):
        if self.tag_name == "#text":
            return f"Node(#text='{self.data[:30]}')"
        if self.tag_name == "#comment":
            return f"Node(#comment='{self.data[:30]}')"
        return f"Node(<{self.tag_name}>, children={len(self.children)})"

    def to_test_format(self, indent=0):
        """Dump the subtree in the html5lib-tests tree format."""
        if self.tag_name in {"#document", "#document-fragment"}:
            return "\n".join(child.to_test_format(0) for child in self.children)
        if self.tag_name == "#text":
            return f'| {" " * indent}"{self.data}"'
        if self.tag_name == "#comment":
            return f"| {' ' * indent}<!-- {self.data} -->"
        if self.tag_name == "!doctype":
            name = self.data if self.data else ""
            return f"| <!DOCTYPE {name}>"

        if self.is_svg:
            display_tag = f"svg {self.tag_name}"
        elif self.is_mathml:
            display_tag = f"math {self.tag_name}"
        else:
            display_tag = self.tag_name
        parts = [f"| {' ' * indent}<{display_tag}>"]
        for key, value in sorted(self.attributes.items()):
            parts.append(f'| {" " * (indent + 2)}{key}="{value if value is not None else ""}"')

        content = getattr(self, "content", None)
        if content is not None:
            parts.append(f"| {' ' * (indent + 2)}content")
            parts.extend(child.to_test_format(indent + 4) for child in content.children)
        parts.extend(child.to_test_format(indent + 2) for child in self.children)
        return "\n".join(parts)


class Text(Node):
    __slots__ = ()

    def __init__(self, data, owner_document=None):
        super().__init__("#text", data=data, owner_document=owner_document)


class Comment(Node):
    __slots__ = ()

    def __init__(self, data, owner_document=None):
        super().__init__("#comment", data=data, owner_document=owner_document)


class DocumentType(Node):
    __slots__ = ("public_id", "system_id")

    def __init__(self, name, public_id="", system_id="", owner_document=None):
        super().__init__("!doctype", data=name, owner_document=owner_document)
        self.public_id = public_id or ""
        self.system_id = system_id or ""

    @property
    def name(self):
        return self.data


class Element(Node):
    __slots__ = ()

    def __init__(self, tag_name, attributes=None, namespace=HTML_NAMESPACE, owner_document=None):
        super().__init__(tag_name, attributes=attributes, namespace=namespace, owner_document=owner_document)

    @property
    def local_name(self):
        return self.tag_name

    @property
    def id(self):
        return self.attributes.get("id") or ""

    def get_attribute(self, name):
        return self.attributes.get(self._attribute_key(name))

    def set_attribute(self, name, value):
        self.attributes[self._attribute_key(name)] = str(value)

    def has_attribute(self, name):
        return self._attribute_key(name) in self.attributes

    def remove_attribute(self, name):
        self.attributes.pop(self._attribute_key(name), None)

    def _attribute_key(self, name):
        if self.namespace == HTML_NAMESPACE and self._in_html_document():
            return name.lower()
        return name

    def _in_html_document(self):
        document = self.owner_document
        return document is None or document.parsing_mode == "html"

    def _fragment_target(self):
        return self

    @property
    def inner_html(self):
        from .serialize import serialize_children

        return serialize_children(self._fragment_target(), xml=not self._in_html_document())

    @inner_html.setter
    def inner_html(self, markup):
        from .treebuilder import parse_fragment

        target = self._fragment_target()
        fragment = parse_fragment(markup, context=self, owner_document=self.owner_document)
        target.remove_all_children()
        target.append_child(fragment)

    @property
    def outer_html(self):
        from .serialize import serialize_node

        return serialize_node(self, xml=not self._in_html_document())

    def __repr__(self):
        return f"<Element {self.tag_name}>"


class TemplateElement(Element):
    """``<template>``; parsed children live in ``content``, not in ``children``."""

    __slots__ = ("content",)

    def __init__(self, attributes=None, namespace=HTML_NAMESPACE, owner_document=None):
        super().__init__("template", attributes=attributes, namespace=namespace, owner_document=owner_document)
        self.content = DocumentFragment(owner_document=owner_document)

    def _fragment_target(self):
        return self.content


class DocumentFragment(Node):
    __slots__ = ()

    def __init__(self, owner_document=None):
        super().__init__("#document-fragment", owner_document=owner_document)

    def __repr__(self):
        return f"<DocumentFragment children={len(self.children)}>"


def create_element(tag_name, attributes=None, namespace=HTML_NAMESPACE, owner_document=None):
    if tag_name == "template" and namespace == HTML_NAMESPACE:
        return TemplateElement(attributes=attributes, namespace=namespace, owner_document=owner_document)
    return Element(tag_name, attributes=attributes, namespace=namespace, owner_document=owner_document)
