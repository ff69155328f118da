"""Turn raw document input into decoded markup.

Byte input is sniffed in the order the HTML standard uses for a document
without a user override:

1. byte-order mark
2. transport-layer label (e.g. the ``charset`` of a Content-Type header)
3. ``<meta>`` declarations found by prescanning the first 1024 bytes
4. the fallback encoding, windows-1252

Labels are resolved through the WHATWG label table that ships with
``webencodings``; an unknown label is ignored rather than reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import webencodings

from .constants import DEFAULT_ENCODING, ENCODING_DISPLAY_NAMES, PRESCAN_LIMIT, TEXT_INPUT_ENCODING

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16le"),
    (b"\xfe\xff", "utf-16be"),
)

_WHITESPACE = b"\t\n\x0c\r "
_WHITESPACE_OR_SLASH = _WHITESPACE + b"/"


@dataclass(frozen=True)
class DecodedMarkup:
    text: str
    encoding: str


def display_name(name: str) -> str:
    """Return the WHATWG spelling of a webencodings encoding name."""
    return ENCODING_DISPLAY_NAMES.get(name, name)


def lookup_label(label: str | None) -> str | None:
    """Resolve an encoding label to its canonical (lowercase) name, or None."""
    if not label:
        return None
    encoding = webencodings.lookup(label)
    if encoding is None:
        return None
    return encoding.name


def detect_bom(data: bytes) -> str | None:
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name
    return None


def sniff_encoding(
    data: bytes,
    *,
    transport_encoding: str | None = None,
    default_encoding: str = DEFAULT_ENCODING,
) -> str:
    """Pick the encoding for ``data``; returns a canonical lowercase name."""
    name = detect_bom(data)
    if name is not None:
        return name

    name = lookup_label(transport_encoding)
    if name is not None:
        return name

    name = prescan(data[:PRESCAN_LIMIT])
    if name is not None:
        return name

    return lookup_label(default_encoding) or DEFAULT_ENCODING


def decode_bytes(data: bytes, label: str) -> tuple[str, str]:
    """Decode ``data`` with ``label``; unknown labels use the fallback decoder.

    A leading byte-order mark still wins and is stripped, as in the
    Encoding Standard's "decode" algorithm.
    """
    encoding = webencodings.lookup(label) or webencodings.lookup(DEFAULT_ENCODING)
    text, used = webencodings.decode(data, encoding, errors="replace")
    return text, used.name


def decode_markup(raw: Any = None, transport_encoding: str | None = None) -> DecodedMarkup:
    """Decode document input. Never raises for supported input types.

    ``None`` is the empty document, ``str`` is taken as already decoded, and
    anything supporting the buffer protocol (bytes, bytearray, memoryview,
    array) is sniffed and decoded.
    """
    if raw is None:
        return DecodedMarkup("", TEXT_INPUT_ENCODING)
    if isinstance(raw, str):
        return DecodedMarkup(raw, TEXT_INPUT_ENCODING)

    try:
        data = memoryview(raw).tobytes()
    except TypeError:
        return DecodedMarkup(str(raw), TEXT_INPUT_ENCODING)

    name = sniff_encoding(data, transport_encoding=transport_encoding)
    text, used = decode_bytes(data, name)
    return DecodedMarkup(text, display_name(used))


# ---------------------------------------------------------------------------
# Meta prescan
# ---------------------------------------------------------------------------


def prescan(data: bytes) -> str | None:
    """Look for a ``<meta>`` charset declaration in the start of a document."""
    length = len(data)
    pos = 0
    while pos < length:
        if data.startswith(b"<!--", pos):
            end = data.find(b"-->", pos + 2)
            if end == -1:
                return None
            pos = end + 3
            continue

        if (
            data[pos : pos + 5].lower() == b"<meta"
            and pos + 5 < length
            and data[pos + 5 : pos + 6] in (b"\t", b"\n", b"\x0c", b"\r", b" ", b"/")
        ):
            pos += 6
            name, pos = _prescan_meta(data, pos)
            if name is not None:
                return name
            continue

        if data.startswith(b"<", pos) and pos + 1 < length:
            nxt = data[pos + 1 : pos + 2]
            if nxt.isalpha() or (nxt == b"/" and data[pos + 2 : pos + 3].isalpha()):
                pos += 2 if nxt != b"/" else 3
                while pos < length and data[pos] not in _WHITESPACE and data[pos] != 0x3E:
                    pos += 1
                while True:
                    attr, pos = _get_attribute(data, pos)
                    if attr is None:
                        break
                if pos < length and data[pos] == 0x3E:
                    pos += 1
                continue
            if nxt in (b"!", b"/", b"?"):
                end = data.find(b">", pos)
                if end == -1:
                    return None
                pos = end + 1
                continue

        pos += 1
    return None


def _prescan_meta(data, pos):
    seen = set()
    got_pragma = False
    need_pragma = None
    charset = None

    while True:
        attr, pos = _get_attribute(data, pos)
        if attr is None:
            break
        name, value = attr
        if name in seen:
            continue
        seen.add(name)
        if name == "http-equiv":
            if value == "content-type":
                got_pragma = True
        elif name == "content":
            if charset is None:
                extracted = extract_charset_from_content(value)
                if extracted is not None:
                    charset = lookup_label(extracted)
                    need_pragma = True
        elif name == "charset":
            charset = lookup_label(value)
            need_pragma = False

    if pos < len(data) and data[pos] == 0x3E:
        pos += 1

    if need_pragma is None or (need_pragma and not got_pragma) or charset is None:
        return None, pos
    if charset in ("utf-16le", "utf-16be"):
        charset = "utf-8"
    elif charset == "x-user-defined":
        charset = "windows-1252"
    return charset, pos


def _get_attribute(data, pos):
    """Read one attribute; returns ((name, value) | None, new position)."""
    length = len(data)
    while pos < length and data[pos] in _WHITESPACE_OR_SLASH:
        pos += 1
    if pos >= length or data[pos] == 0x3E:
        return None, pos

    name = bytearray()
    value = bytearray()
    while True:
        if pos >= length:
            return None, pos
        c = data[pos]
        if c == 0x3D and name:
            pos += 1
            break
        if c in _WHITESPACE:
            while pos < length and data[pos] in _WHITESPACE:
                pos += 1
            if pos >= length or data[pos] != 0x3D:
                return (_ascii(name), ""), pos
            pos += 1
            break
        if c in (0x2F, 0x3E):
            return (_ascii(name), ""), pos
        name.append(_lower(c))
        pos += 1

    while pos < length and data[pos] in _WHITESPACE:
        pos += 1
    if pos >= length:
        return None, pos

    c = data[pos]
    if c in (0x22, 0x27):
        quote = c
        pos += 1
        while pos < length:
            c = data[pos]
            pos += 1
            if c == quote:
                return (_ascii(name), _ascii(value)), pos
            value.append(_lower(c))
        return None, pos
    if c == 0x3E:
        return (_ascii(name), ""), pos

    while pos < length:
        c = data[pos]
        if c in _WHITESPACE or c == 0x3E:
            return (_ascii(name), _ascii(value)), pos
        value.append(_lower(c))
        pos += 1
    return None, pos


def extract_charset_from_content(content: str) -> str | None:
    """Pull the ``charset=`` value out of a meta ``content`` attribute."""
    lowered = content.lower()
    pos = 0
    length = len(content)
    while True:
        idx = lowered.find("charset", pos)
        if idx == -1:
            return None
        pos = idx + 7
        while pos < length and content[pos] in "\t\n\x0c\r ":
            pos += 1
        if pos >= length or content[pos] != "=":
            continue
        pos += 1
        while pos < length and content[pos] in "\t\n\x0c\r ":
            pos += 1
        if pos >= length:
            return None
        if content[pos] in "\"'":
            quote = content[pos]
            end = content.find(quote, pos + 1)
            if end == -1:
                return None
            return content[pos + 1 : end]
        end = pos
        while end < length and content[end] not in "\t\n\x0c\r ;":
            end += 1
        return content[pos:end] or None


def _lower(c):
    return c + 0x20 if 0x41 <= c <= 0x5A else c


def _ascii(buf):
    return bytes(buf).decode("latin-1")
