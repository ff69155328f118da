"""Absolute URL parsing, serialization and origins.

A small subset of the URL Standard: only absolute URLs are accepted, special
schemes get a lowercased (IDNA-encoded) host, a default port is dropped, an
empty path becomes ``/``, dot segments are removed from hierarchical paths,
and each component is percent-encoded with its own encode set. ``urllib.parse``
does the splitting.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

SPECIAL_SCHEMES = {
    "ftp": 21,
    "file": None,
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
}

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_FORBIDDEN_HOST_CHARS = frozenset("\x00\t\n\r #/:<>?@[\\]^|%")
_C0_CONTROL_OR_SPACE = "".join(chr(c) for c in range(0x21))

# Percent-encode sets. Every set also covers C0 controls and anything past "~".
_C0_CONTROL_SET = frozenset()
_FRAGMENT_SET = frozenset(' "<>`')
_QUERY_SET = frozenset(' "#<>')
_SPECIAL_QUERY_SET = _QUERY_SET | {"'"}
_PATH_SET = _QUERY_SET | frozenset("?`{}")
_USERINFO_SET = _PATH_SET | frozenset("/:;=@[\\]^|")

_SINGLE_DOT = frozenset({".", "%2e"})
_DOUBLE_DOT = frozenset({"..", ".%2e", "%2e.", "%2e%2e"})


class URLRecord:
    __slots__ = ("fragment", "host", "password", "path", "port", "query", "scheme", "username")

    def __init__(self, scheme, host=None, port=None, path="", query=None, fragment=None, username="", password=""):
        self.scheme = scheme
        self.host = host
        self.port = port
        self.path = path
        self.query = query
        self.fragment = fragment
        self.username = username
        self.password = password

    @property
    def href(self):
        return serialize_url(self)

    @property
    def origin(self):
        return serialize_origin(self)

    def __eq__(self, other):
        if not isinstance(other, URLRecord):
            return NotImplemented
        return self.href == other.href

    __hash__ = None

    def __repr__(self):
        return f"URLRecord({self.href!r})"

    def __str__(self):
        return self.href


def parse_url(value) -> URLRecord | None:
    """Parse an absolute URL; returns None when ``value`` is not one."""
    text = str(value).strip(_C0_CONTROL_OR_SPACE)
    text = text.replace("\t", "").replace("\n", "").replace("\r", "")
    if not _SCHEME.match(text):
        return None

    scheme = text[: text.index(":")].lower()
    special = scheme in SPECIAL_SCHEMES
    if special:
        text = text.replace("\\", "/")

    try:
        parts = urlsplit(text, allow_fragments=True)
    except ValueError:
        return None

    query = parts.query if "?" in text.split("#", 1)[0] else None
    fragment = parts.fragment if "#" in text else None
    has_authority = text[len(scheme) + 1 :].startswith("//")

    host = None
    port = None
    username = ""
    password = ""
    if has_authority:
        netloc = parts.netloc
        if "@" in netloc:
            userinfo, _, netloc = netloc.rpartition("@")
            username, _, password = userinfo.partition(":")
        host, port = _split_host_port(netloc)
        if host is None:
            return None
        try:
            host = _parse_host(host, special)
        except ValueError:
            return None
        if host is None:
            return None
        if port is not None and port == SPECIAL_SCHEMES.get(scheme):
            port = None
    elif special and scheme != "file":
        return None

    if special and scheme != "file" and not host:
        return None

    path = parts.path
    if special or path.startswith("/"):
        path = _percent_encode(_remove_dot_segments(path), _PATH_SET)
    else:
        path = _percent_encode(path, _C0_CONTROL_SET)

    query_set = _SPECIAL_QUERY_SET if special else _QUERY_SET
    return URLRecord(
        scheme,
        host=host,
        port=port,
        path=path,
        query=None if query is None else _percent_encode(query, query_set),
        fragment=None if fragment is None else _percent_encode(fragment, _FRAGMENT_SET),
        username=_percent_encode(username, _USERINFO_SET),
        password=_percent_encode(password, _USERINFO_SET),
    )


def _percent_encode(text, encode_set):
    if all(" " < ch < "\x7f" and ch not in encode_set for ch in text):
        return text
    out = []
    for ch in text:
        if " " < ch < "\x7f" and ch not in encode_set:
            out.append(ch)
        elif ch == " " and " " not in encode_set:
            out.append(ch)
        else:
            out.extend(f"%{byte:02X}" for byte in ch.encode("utf-8", "surrogatepass"))
    return "".join(out)


def _remove_dot_segments(path):
    """Resolve ``.`` and ``..`` segments; the result always starts with ``/``."""
    segments = path.split("/")[1:] if path.startswith("/") else path.split("/")
    if not segments:
        return "/"
    out = []
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        lowered = segment.lower()
        if lowered in _DOUBLE_DOT:
            if out:
                out.pop()
            if index == last:
                out.append("")
        elif lowered in _SINGLE_DOT:
            if index == last:
                out.append("")
        else:
            out.append(segment)
    return "/" + "/".join(out)


def _split_host_port(netloc):
    if netloc.startswith("["):
        end = netloc.find("]")
        if end == -1:
            return None, None
        host, rest = netloc[: end + 1], netloc[end + 1 :]
    else:
        host, sep, rest = netloc.partition(":")
        rest = sep + rest
    if not rest:
        return host, None
    if not rest.startswith(":"):
        return None, None
    digits = rest[1:]
    if not digits:
        return host, None
    if not digits.isdigit() or not digits.isascii() or int(digits) > 65535:
        return None, None
    return host, int(digits)


def _parse_host(host, special):
    if host.startswith("["):
        return host.lower()
    if not special:
        if any(ch in _FORBIDDEN_HOST_CHARS and ch != "%" for ch in host):
            return None
        return host
    if not host.isascii():
        host = host.encode("idna").decode("ascii")
    host = host.lower()
    if any(ch in _FORBIDDEN_HOST_CHARS for ch in host):
        return None
    return host


def serialize_url(url: URLRecord, *, exclude_fragment=False) -> str:
    out = [url.scheme, ":"]
    if url.host is not None:
        out.append("//")
        if url.username or url.password:
            out.append(url.username)
            if url.password:
                out.append(":" + url.password)
            out.append("@")
        out.append(url.host)
        if url.port is not None:
            out.append(f":{url.port}")
    out.append(url.path)
    if url.query is not None:
        out.append("?" + url.query)
    if url.fragment is not None and not exclude_fragment:
        out.append("#" + url.fragment)
    return "".join(out)


def serialize_origin(url: URLRecord) -> str:
    """Serialize the origin of ``url``; opaque origins serialize as ``null``."""
    if url.scheme in SPECIAL_SCHEMES and url.scheme != "file":
        result = f"{url.scheme}://{url.host}"
        if url.port is not None:
            result += f":{url.port}"
        return result
    if url.scheme == "blob":
        inner = parse_url(url.path)
        if inner is not None and inner.scheme in ("http", "https"):
            return serialize_origin(inner)
    return "null"
