"""Build a window and its document from decoded markup and settings."""

from __future__ import annotations

import logging

from .constants import FETCHABLE_ELEMENTS, RESOURCES_USABLE, SCRIPT_ELEMENT
from .encoding import DecodedMarkup
from .options import Settings
from .treebuilder import parse_document
from .window import Window

logger = logging.getLogger(__name__)


def build_feature_table(resources, run_scripts):
    """Element categories allowed to fetch external resources.

    Nothing is fetchable unless resources are usable; scripts additionally
    need ``run_scripts="dangerously"``.
    """
    if resources != RESOURCES_USABLE:
        return frozenset()
    features = set(FETCHABLE_ELEMENTS)
    if run_scripts == "dangerously":
        features.add(SCRIPT_ELEMENT)
    return frozenset(features)


def create_window(markup: DecodedMarkup, settings: Settings) -> Window:
    return Window(
        url=settings.url,
        referrer=settings.referrer,
        content_type=settings.content_type,
        parsing_mode=settings.parsing_mode,
        user_agent=settings.user_agent,
        include_node_locations=settings.include_node_locations,
        run_scripts=settings.run_scripts,
        virtual_console=settings.virtual_console,
        cookie_jar=settings.cookie_jar,
        encoding=markup.encoding,
    )


def bootstrap(markup: DecodedMarkup, settings: Settings) -> Window:
    """Create the window, run ``before_parse``, parse, then close the document.

    Any exception escapes as-is and no window is returned.
    """
    features = build_feature_table(settings.resources, settings.run_scripts)

    window = create_window(markup, settings)
    document = window.document
    logger.debug("created %r for %s (%s)", document, settings.url, markup.encoding)

    document.apply_features(features)
    logger.debug("features: %s", ", ".join(sorted(features)) or "none")

    settings.before_parse(window.global_proxy)

    parse_document(document, markup.text)

    document.close()
    return window
