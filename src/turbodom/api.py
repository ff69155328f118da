"""Public entry point: ``TurboDOM`` builds and owns one document environment."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Mapping
from pathlib import Path

from .encoding import decode_markup
from .environment import bootstrap
from .errors import OptionTypeError, UsageError
from .mimetype import parse_mime_type
from .options import Options, coerce_options, normalize_options
from .serialize import serialize_document
from .urls import parse_url

logger = logging.getLogger(__name__)

_XML_SUFFIXES = (".xhtml", ".xht", ".xml")
_XHTML_CONTENT_TYPE = "application/xhtml+xml"

_shared_fragment_document = None
_fragment_lock = threading.Lock()


def _merge_options(options, overrides):
    """Keyword arguments that were given win over the fields of ``options``."""
    base = coerce_options(options)
    given = {name: value for name, value in overrides.items() if value is not None}
    if not given:
        return base
    return dataclasses.replace(base, **given)


def _header(headers, name):
    if not headers:
        return None
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


class TurboDOM:
    """A window and document built from markup.

    Usage:
        dom = TurboDOM("<p>Hello</p>", url="https://example.com/")
        dom.window.document.body.inner_html
    """

    def __init__(
        self,
        html=None,
        *,
        options=None,
        content_type=None,
        url=None,
        referrer=None,
        user_agent=None,
        include_node_locations=False,
        cookie_jar=None,
        virtual_console=None,
        resources=None,
        run_scripts=None,
        before_parse=None,
    ):
        merged = _merge_options(
            options,
            {
                "content_type": content_type,
                "url": url,
                "referrer": referrer,
                "user_agent": user_agent,
                "include_node_locations": include_node_locations or None,
                "cookie_jar": cookie_jar,
                "virtual_console": virtual_console,
                "resources": resources,
                "run_scripts": run_scripts,
                "before_parse": before_parse,
            },
        )
        self._build(html, None, merged)

    def _build(self, raw, transport_encoding, options):
        markup = decode_markup(raw, transport_encoding)
        settings = normalize_options(options)
        logger.debug("building environment: %s, %s, %s", settings.url, settings.content_type, markup.encoding)
        self._settings = settings
        self._window = bootstrap(markup, settings)

    @classmethod
    def _from_transport(cls, raw, transport_encoding, options=None):
        """Build from bytes whose encoding label came from the transport layer."""
        handle = cls.__new__(cls)
        handle._build(raw, transport_encoding, coerce_options(options))
        return handle

    @classmethod
    def from_file(cls, path, **options):
        """Build from a file on disk, with the file URL as the document URL."""
        path = Path(path)
        data = path.read_bytes()
        options.setdefault("url", path.resolve().as_uri())
        if path.suffix.lower() in _XML_SUFFIXES:
            options.setdefault("content_type", _XHTML_CONTENT_TYPE)
        return cls._from_transport(data, None, Options(**options))

    @classmethod
    def from_response(cls, body, *, url, headers=None, **options):
        """Build from a response the caller already fetched.

        The ``charset`` parameter of the Content-Type header is used as the
        transport encoding label and the header's media type becomes the
        default content type.
        """
        transport_encoding = None
        header = _header(headers, "content-type")
        if header is not None:
            mime_type = parse_mime_type(header)
            if mime_type is not None:
                transport_encoding = mime_type.parameters.get("charset")
                options.setdefault("content_type", mime_type.essence)
        options["url"] = url
        return cls._from_transport(body, transport_encoding, Options(**options))

    @property
    def window(self):
        return self._window.global_proxy

    @property
    def virtual_console(self):
        return self._settings.virtual_console

    @property
    def cookie_jar(self):
        return self._window.document.cookie_jar

    def serialize(self):
        return serialize_document(self._window.document)

    def node_location(self, node):
        if not self._window.document.include_node_locations:
            msg = (
                "Location information was not saved for this document. "
                "Use include_node_locations during creation."
            )
            raise UsageError(msg)
        return node.location

    def reconfigure(self, settings):
        """Change the top window identity and/or the document URL.

        Only ``window_top`` and ``url`` are recognized. A bad URL raises
        before anything is changed.
        """
        if not isinstance(settings, Mapping):
            msg = f"settings must be a mapping, not {type(settings).__name__}"
            raise TypeError(msg)

        url = None
        if "url" in settings:
            url = parse_url(settings["url"])
            if url is None:
                raise OptionTypeError("url", f'Could not parse "{settings["url"]}" as a URL')

        if "window_top" in settings:
            self._window._top = settings["window_top"]
        if url is not None:
            self._window.document.set_url(url)
            logger.debug("document URL changed to %s", url.href)

    @staticmethod
    def fragment(markup):
        """Parse ``markup`` into a ``DocumentFragment`` owned by a shared document."""
        template = _fragment_document().create_element("template")
        template.inner_html = markup
        return template.content

    def __repr__(self):
        return f"<TurboDOM {self._window.document.url}>"


def _fragment_document():
    global _shared_fragment_document
    if _shared_fragment_document is None:
        with _fragment_lock:
            if _shared_fragment_document is None:
                _shared_fragment_document = TurboDOM().window.document
    return _shared_fragment_document
