"""Structured media type parsing (``type/subtype;name=value``)."""

from __future__ import annotations

import re

_TOKEN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")
_QUOTED_STRING_CHARS = re.compile(r"^[\t\x20-\x7e\x80-\xff]*$")
_HTTP_WHITESPACE = "\t\n\r "

_XML_ESSENCES = frozenset({"text/xml", "application/xml"})


class MIMEType:
    __slots__ = ("parameters", "subtype", "type")

    def __init__(self, type_, subtype, parameters=None):
        self.type = type_
        self.subtype = subtype
        self.parameters = parameters if parameters is not None else {}

    @property
    def essence(self):
        return f"{self.type}/{self.subtype}"

    def is_html(self):
        return self.essence == "text/html"

    def is_xml(self):
        return self.subtype.endswith("+xml") or self.essence in _XML_ESSENCES

    def __eq__(self, other):
        if not isinstance(other, MIMEType):
            return NotImplemented
        return self.essence == other.essence and self.parameters == other.parameters

    __hash__ = None

    def __repr__(self):
        return f"MIMEType({str(self)!r})"

    def __str__(self):
        parts = [self.essence]
        for name, value in self.parameters.items():
            if not value or not _TOKEN.match(value):
                value = '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
            parts.append(f"{name}={value}")
        return ";".join(parts)


def parse_mime_type(value) -> MIMEType | None:
    """Parse ``value``; returns None when it is not a valid media type.

    Type, subtype and parameter names are lowercased. Invalid parameters are
    skipped and the first occurrence of a repeated parameter wins.
    """
    text = str(value).strip(_HTTP_WHITESPACE)
    slash = text.find("/")
    if slash == -1:
        return None
    type_ = text[:slash]
    if not _TOKEN.match(type_):
        return None

    pos = slash + 1
    semi = text.find(";", pos)
    end = len(text) if semi == -1 else semi
    subtype = text[pos:end].rstrip(_HTTP_WHITESPACE)
    if not _TOKEN.match(subtype):
        return None

    mime = MIMEType(type_.lower(), subtype.lower())
    pos = end
    length = len(text)
    while pos < length:
        # skip ';' and leading whitespace
        pos += 1
        while pos < length and text[pos] in _HTTP_WHITESPACE:
            pos += 1

        name_end = pos
        while name_end < length and text[name_end] not in ";=":
            name_end += 1
        name = text[pos:name_end].lower()
        pos = name_end
        if pos >= length:
            break
        if text[pos] == ";":
            continue
        pos += 1

        if pos < length and text[pos] == '"':
            param_value, pos = _collect_quoted(text, pos)
            while pos < length and text[pos] != ";":
                pos += 1
        else:
            value_end = text.find(";", pos)
            if value_end == -1:
                value_end = length
            param_value = text[pos:value_end].rstrip(_HTTP_WHITESPACE)
            pos = value_end
            if not param_value:
                continue

        if (
            name
            and _TOKEN.match(name)
            and _QUOTED_STRING_CHARS.match(param_value)
            and name not in mime.parameters
        ):
            mime.parameters[name] = param_value
    return mime


def _collect_quoted(text, pos):
    """Collect an HTTP quoted string starting at the opening quote."""
    chars = []
    pos += 1
    length = len(text)
    while pos < length:
        ch = text[pos]
        if ch == "\\":
            pos += 1
            if pos >= length:
                chars.append("\\")
                break
            chars.append(text[pos])
        elif ch == '"':
            pos += 1
            break
        else:
            chars.append(ch)
        pos += 1
    return "".join(chars), pos
