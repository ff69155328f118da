"""Console collaborator for document environments.

``window.console.log(...)`` inside an environment does not print anything by
itself; it emits a ``"log"`` event on the environment's virtual console.
Listeners decide where output goes. ``send_to`` wires every console method to
a ``logging.Logger`` (or anything with the same methods).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

CONSOLE_METHODS = ("log", "info", "warn", "error", "debug", "trace", "dir")

# Event emitted for problems the environment itself runs into (bad markup in
# XML mode, failing load listeners)
INTERNAL_ERROR = "internal-error"

_LEVELS = {
    "log": logging.INFO,
    "info": logging.INFO,
    "dir": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

CONSOLE_LOGGER = "turbodom.console"


class VirtualConsole:
    def __init__(self):
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, listener: Callable[..., Any]) -> VirtualConsole:
        self._listeners[event].append(listener)
        return self

    def off(self, event: str, listener: Callable[..., Any]) -> VirtualConsole:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener for ``event``; returns whether any were registered."""
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def send_to(self, target: Any, *, omit_internal_errors: bool = False) -> VirtualConsole:
        """Forward every console method to ``target``.

        A ``logging.Logger`` receives each call at the matching level. Any
        other object is called by console method name when it has one.
        """
        if isinstance(target, logging.Logger):
            for method in CONSOLE_METHODS:
                self.on(method, _logger_forwarder(target, _LEVELS[method]))
            if not omit_internal_errors:
                self.on(INTERNAL_ERROR, lambda error: target.error("%s", error))
            return self

        for method in CONSOLE_METHODS:
            forward = getattr(target, method, None)
            if callable(forward):
                self.on(method, forward)
        if not omit_internal_errors:
            report = getattr(target, "error", None)
            if callable(report):
                self.on(INTERNAL_ERROR, report)
        return self

    def __repr__(self):
        counts = {event: len(listeners) for event, listeners in self._listeners.items() if listeners}
        return f"VirtualConsole(listeners={counts})"


def _logger_forwarder(logger, level):
    def forward(*args):
        logger.log(level, " ".join(str(arg) for arg in args))

    return forward


def default_virtual_console() -> VirtualConsole:
    return VirtualConsole().send_to(logging.getLogger(CONSOLE_LOGGER))
