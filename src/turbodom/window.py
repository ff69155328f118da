"""The global object of a document environment.

``Window`` holds the environment's internal state. Callers only ever see its
``WindowProxy``, which forwards attribute access to the window; that is the
object handed to ``before_parse`` and returned by ``TurboDOM.window``.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from .document import Document
from .virtual_console import INTERNAL_ERROR

logger = logging.getLogger(__name__)


class Event:
    __slots__ = ("target", "type")

    def __init__(self, type_, target=None):
        self.type = type_
        self.target = target

    def __repr__(self):
        return f"Event({self.type!r})"


class Navigator:
    __slots__ = ("user_agent",)

    def __init__(self, user_agent):
        self.user_agent = user_agent


class Location:
    """Read-only view of the document URL."""

    __slots__ = ("_document",)

    def __init__(self, document):
        self._document = document

    @property
    def href(self):
        return self._document.url

    @property
    def origin(self):
        return self._document.origin

    @property
    def protocol(self):
        return self._document.url_record.scheme + ":"

    @property
    def host(self):
        url = self._document.url_record
        if url.host is None:
            return ""
        if url.port is None:
            return url.host
        return f"{url.host}:{url.port}"

    @property
    def hostname(self):
        return self._document.url_record.host or ""

    @property
    def port(self):
        port = self._document.url_record.port
        return "" if port is None else str(port)

    @property
    def pathname(self):
        return self._document.url_record.path

    @property
    def search(self):
        query = self._document.url_record.query
        return f"?{query}" if query else ""

    @property
    def hash(self):
        fragment = self._document.url_record.fragment
        return f"#{fragment}" if fragment else ""

    def __str__(self):
        return self.href

    def __repr__(self):
        return f"Location({self.href!r})"


class Console:
    """``window.console``: every call becomes a virtual console event."""

    __slots__ = ("_virtual_console",)

    def __init__(self, virtual_console):
        self._virtual_console = virtual_console

    def _emit(self, method, args):
        if self._virtual_console is not None:
            self._virtual_console.emit(method, *args)

    def log(self, *args):
        self._emit("log", args)

    def info(self, *args):
        self._emit("info", args)

    def warn(self, *args):
        self._emit("warn", args)

    def error(self, *args):
        self._emit("error", args)

    def debug(self, *args):
        self._emit("debug", args)

    def trace(self, *args):
        self._emit("trace", args)

    def dir(self, *args):
        self._emit("dir", args)


class Window:
    def __init__(
        self,
        *,
        url,
        referrer,
        content_type,
        parsing_mode,
        user_agent,
        include_node_locations,
        run_scripts,
        virtual_console,
        cookie_jar,
        encoding,
    ):
        self._virtual_console = virtual_console
        self._run_scripts = run_scripts
        self._listeners = defaultdict(list)
        self._global_proxy = WindowProxy(self)
        self._top = self._global_proxy
        self._document = Document(
            url=url,
            referrer=referrer,
            content_type=content_type,
            parsing_mode=parsing_mode,
            character_set=encoding,
            include_node_locations=include_node_locations,
            cookie_jar=cookie_jar,
            default_view=self._global_proxy,
        )
        self.navigator = Navigator(user_agent)
        self.location = Location(self._document)
        self.console = Console(virtual_console)

    @property
    def document(self):
        return self._document

    @property
    def global_proxy(self):
        return self._global_proxy

    @property
    def window(self):
        return self._global_proxy

    @property
    def self(self):
        return self._global_proxy

    @property
    def top(self):
        return self._top

    @property
    def run_scripts(self):
        return self._run_scripts

    def add_event_listener(self, type_, listener):
        if listener not in self._listeners[type_]:
            self._listeners[type_].append(listener)

    def remove_event_listener(self, type_, listener):
        listeners = self._listeners.get(type_)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def dispatch_event(self, type_):
        """Run the listeners for ``type_``.

        A listener that raises is reported to the virtual console and does not
        stop the remaining listeners.
        """
        event = Event(type_, target=self._global_proxy)
        for listener in list(self._listeners.get(type_, ())):
            try:
                listener(event)
            except Exception as exc:
                logger.debug("%s listener %r raised %r", type_, listener, exc)
                if self._virtual_console is not None:
                    self._virtual_console.emit(INTERNAL_ERROR, exc)
        return event

    def __repr__(self):
        return f"<Window {self._document.url}>"


class WindowProxy:
    """Externally visible face of a ``Window``."""

    __slots__ = ("_window",)

    def __init__(self, window):
        object.__setattr__(self, "_window", window)

    def __getattr__(self, name):
        return getattr(object.__getattribute__(self, "_window"), name)

    def __setattr__(self, name, value):
        setattr(object.__getattribute__(self, "_window"), name, value)

    def __delattr__(self, name):
        delattr(object.__getattribute__(self, "_window"), name)

    def __dir__(self):
        return dir(object.__getattribute__(self, "_window"))

    def __repr__(self):
        return repr(object.__getattribute__(self, "_window"))
