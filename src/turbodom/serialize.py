"""HTML and XML serialization for turbodom nodes."""

from __future__ import annotations

from typing import Any

from .constants import HTML_NAMESPACE, RAW_TEXT_SERIALIZATION, VOID_ELEMENTS


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace("&", "&amp;").replace("\xa0", "&nbsp;").replace('"', "&quot;")


def _escape_xml_text(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_xml_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace('"', "&quot;")
        .replace("\t", "&#x9;")
        .replace("\n", "&#xA;")
        .replace("\r", "&#xD;")
    )


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None, *, xml: bool = False, empty: bool = False) -> str:
    parts: list[str] = ["<", name]
    escape = _escape_xml_attr_value if xml else _escape_attr_value
    for key, value in (attrs or {}).items():
        parts.extend([" ", key, '="', escape(value), '"'])
    parts.append("/>" if empty else ">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _children_of(node):
    content = getattr(node, "content", None)
    return content.children if content is not None else node.children


def _serialize_doctype(node, xml):
    if not xml:
        return f"<!DOCTYPE {node.data}>"
    parts = ["<!DOCTYPE ", node.data]
    if node.public_id:
        parts.append(f' PUBLIC "{node.public_id}"')
    elif node.system_id:
        parts.append(" SYSTEM")
    if node.system_id:
        parts.append(f' "{node.system_id}"')
    parts.append(">")
    return "".join(parts)


def _serialize_into(node: Any, out: list[str], xml: bool) -> None:
    name = node.tag_name

    if name == "#text":
        parent = node.parent
        if xml:
            out.append(_escape_xml_text(node.data))
        elif parent is not None and parent.namespace == HTML_NAMESPACE and parent.tag_name in RAW_TEXT_SERIALIZATION:
            out.append(node.data)
        else:
            out.append(_escape_text(node.data))
        return

    if name == "#comment":
        out.append(f"<!--{node.data}-->")
        return

    if name == "!doctype":
        out.append(_serialize_doctype(node, xml))
        return

    if name in ("#document", "#document-fragment"):
        for child in node.children:
            _serialize_into(child, out, xml)
        return

    children = _children_of(node)
    if xml:
        if not children:
            out.append(serialize_start_tag(name, node.attributes, xml=True, empty=True))
            return
        out.append(serialize_start_tag(name, node.attributes, xml=True))
    else:
        out.append(serialize_start_tag(name, node.attributes))
        if node.namespace == HTML_NAMESPACE and name in VOID_ELEMENTS:
            return

    for child in children:
        _serialize_into(child, out, xml)
    out.append(serialize_end_tag(name))


def serialize_node(node: Any, *, xml: bool = False) -> str:
    """Serialize ``node`` itself (its outer markup)."""
    out: list[str] = []
    _serialize_into(node, out, xml)
    return "".join(out)


def serialize_children(node: Any, *, xml: bool = False) -> str:
    """Serialize the children of ``node`` (its inner markup)."""
    out: list[str] = []
    for child in _children_of(node):
        _serialize_into(child, out, xml)
    return "".join(out)


def serialize_document(document: Any) -> str:
    return serialize_node(document, xml=document.parsing_mode == "xml")
