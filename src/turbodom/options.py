"""Option validation for document environments.

``normalize_options`` takes the loose, user-facing :class:`Options` and
returns a complete :class:`Settings` record, or raises the
:class:`~turbodom.errors.ValidationError` for the first bad field. Fields are
checked in a fixed order (the order of the ``Options`` fields) so the same
input always reports the same error.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from .constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_REFERRER,
    DEFAULT_URL,
    RESOURCES_USABLE,
    RUN_SCRIPTS_MODES,
    VERSION,
)
from .errors import OptionRangeError, OptionTypeError
from .mimetype import parse_mime_type
from .urls import parse_url
from .virtual_console import VirtualConsole, default_virtual_console

DEFAULT_USER_AGENT = (
    f"Mozilla/5.0 ({sys.platform}) AppleWebKit/537.36 (KHTML, like Gecko) turbodom/{VERSION}"
)


def _no_op(global_proxy):
    return None


@dataclass(frozen=True)
class Options:
    """User-facing options. ``None`` means "not given"."""

    content_type: str | None = None
    url: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    include_node_locations: bool | None = None
    cookie_jar: Any = None
    virtual_console: VirtualConsole | None = None
    resources: str | None = None
    run_scripts: str | None = None
    before_parse: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class Settings:
    """Validated options with every default filled in."""

    content_type: str = DEFAULT_CONTENT_TYPE
    parsing_mode: str = "html"
    url: str = DEFAULT_URL
    referrer: str = DEFAULT_REFERRER
    user_agent: str = DEFAULT_USER_AGENT
    include_node_locations: bool = False
    # None: the window allocates its own cookie store on first use
    cookie_jar: Any = field(default=None, compare=False)
    virtual_console: VirtualConsole | None = field(default=None, compare=False)
    resources: str | None = None
    run_scripts: str | None = None
    before_parse: Callable[[Any], Any] = field(default=_no_op, compare=False)

    def as_options(self) -> Options:
        """Options that normalize back to an equal ``Settings``."""
        return Options(
            content_type=self.content_type,
            url=self.url,
            referrer=self.referrer or None,
            user_agent=self.user_agent,
            include_node_locations=self.include_node_locations,
            cookie_jar=self.cookie_jar,
            virtual_console=self.virtual_console,
            resources=self.resources,
            run_scripts=self.run_scripts,
            before_parse=None if self.before_parse is _no_op else self.before_parse,
        )


def coerce_options(options: Options | Mapping[str, Any] | None) -> Options:
    if options is None:
        return Options()
    if isinstance(options, Options):
        return options
    if isinstance(options, Mapping):
        return Options(**options)
    msg = f"options must be an Options instance or a mapping, not {type(options).__name__}"
    raise TypeError(msg)


def normalize_options(options: Options | Mapping[str, Any] | None = None) -> Settings:
    options = coerce_options(options)
    values: dict[str, Any] = {}

    if options.content_type is not None:
        parsed = parse_mime_type(options.content_type)
        if parsed is None:
            raise OptionTypeError(
                "content_type",
                f'Could not parse the given content type of "{options.content_type}"',
            )
        if not parsed.is_html() and not parsed.is_xml():
            raise OptionRangeError(
                "content_type",
                f'The given content type of "{options.content_type}" was not a HTML or XML content type',
            )
        values["content_type"] = parsed.essence
        values["parsing_mode"] = "html" if parsed.is_html() else "xml"

    if options.url is not None:
        values["url"] = _parse_url_option("url", options.url)

    if options.referrer is not None:
        values["referrer"] = _parse_url_option("referrer", options.referrer)

    if options.user_agent is not None:
        values["user_agent"] = str(options.user_agent)

    if options.include_node_locations:
        if values.get("parsing_mode") == "xml":
            raise OptionTypeError(
                "include_node_locations",
                "Cannot set include_node_locations to true with an XML content type",
            )
        values["include_node_locations"] = True

    values["cookie_jar"] = options.cookie_jar

    if options.virtual_console is None:
        values["virtual_console"] = default_virtual_console()
    else:
        values["virtual_console"] = options.virtual_console

    if options.resources is not None:
        resources = str(options.resources)
        if resources != RESOURCES_USABLE:
            raise OptionRangeError("resources", f'resources must be None or "usable", not "{resources}"')
        values["resources"] = resources

    if options.run_scripts is not None:
        run_scripts = str(options.run_scripts)
        if run_scripts not in RUN_SCRIPTS_MODES:
            raise OptionRangeError(
                "run_scripts",
                f'run_scripts must be None, "dangerously", or "outside-only", not "{run_scripts}"',
            )
        values["run_scripts"] = run_scripts

    if options.before_parse is not None:
        if not callable(options.before_parse):
            raise OptionTypeError(
                "before_parse",
                f"before_parse must be callable, not {type(options.before_parse).__name__}",
            )
        values["before_parse"] = options.before_parse

    return Settings(**values)


def _parse_url_option(name, value):
    url = parse_url(value)
    if url is None:
        raise OptionTypeError(name, f'Could not parse "{value}" as a URL')
    return url.href
