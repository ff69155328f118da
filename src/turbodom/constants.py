"""Document Environment Constants

This module collects the element tables used by the tree builders and the
serializer, plus the fixed defaults of the environment pipeline. Elements are
kept in lists where iteration order matters and in sets where only lookups
happen.

Usage:
    from turbodom.constants import VOID_ELEMENTS, DEFAULT_URL

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/syntax.html#optional-tags
    - https://encoding.spec.whatwg.org/#names-and-labels
"""

# Namespaces
HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
MATHML_NAMESPACE = "http://www.w3.org/1998/Math/MathML"

FOREIGN_ROOTS = {
    "svg": SVG_NAMESPACE,
    "math": MATHML_NAMESPACE,
}

# Environment defaults
DEFAULT_URL = "about:blank"
DEFAULT_REFERRER = ""
DEFAULT_CONTENT_TYPE = "text/html"
DEFAULT_ENCODING = "windows-1252"
TEXT_INPUT_ENCODING = "UTF-8"

# Bytes inspected by the meta prescan
PRESCAN_LIMIT = 1024

RESOURCES_USABLE = "usable"
RUN_SCRIPTS_MODES = ("dangerously", "outside-only")

# Element categories allowed to fetch once resources are usable. Script
# fetching additionally requires runScripts "dangerously".
FETCHABLE_ELEMENTS = ("link", "img", "frame", "iframe")
SCRIPT_ELEMENT = "script"

# HTML Element Sets
VOID_ELEMENTS = frozenset({
    "area",
    "base",
    "basefont",
    "bgsound",
    "br",
    "col",
    "embed",
    "frame",
    "hr",
    "img",
    "input",
    "keygen",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
})

# Start tags that belong in <head> while the body has not been started
HEAD_ELEMENTS = frozenset({
    "base",
    "basefont",
    "bgsound",
    "link",
    "meta",
    "noframes",
    "script",
    "style",
    "template",
    "title",
})

# Children are serialized verbatim, without escaping
RAW_TEXT_SERIALIZATION = frozenset({
    "iframe",
    "noembed",
    "noframes",
    "noscript",
    "plaintext",
    "script",
    "style",
    "xmp",
})

# Open element -> start tags that implicitly close it
AUTO_CLOSING_TAGS = {
    "p": [
        "address",
        "article",
        "aside",
        "blockquote",
        "center",
        "details",
        "dialog",
        "dir",
        "div",
        "dl",
        "dt",
        "dd",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "listing",
        "main",
        "menu",
        "nav",
        "ol",
        "p",
        "plaintext",
        "pre",
        "search",
        "section",
        "summary",
        "table",
        "ul",
    ],
    "li": ["li"],
    "dt": ["dt", "dd"],
    "dd": ["dt", "dd"],
    "tr": ["tr", "thead", "tbody", "tfoot"],
    "td": ["td", "th", "tr", "thead", "tbody", "tfoot"],
    "th": ["td", "th", "tr", "thead", "tbody", "tfoot"],
    "thead": ["thead", "tbody", "tfoot"],
    "tbody": ["thead", "tbody", "tfoot"],
    "tfoot": ["thead", "tbody", "tfoot"],
    "option": ["option", "optgroup"],
    "optgroup": ["optgroup"],
    "rt": ["rt", "rp"],
    "rp": ["rt", "rp"],
}

# Open element -> ancestors that stop the search for it
CLOSE_ON_PARENT_CLOSE = {
    "li": ["ul", "ol", "menu"],
    "dt": ["dl"],
    "dd": ["dl"],
    "rt": ["ruby", "rtc"],
    "rp": ["ruby", "rtc"],
    "option": ["select", "datalist"],
    "optgroup": ["select"],
    "tr": ["table"],
    "td": ["table"],
    "th": ["table"],
    "thead": ["table"],
    "tbody": ["table"],
    "tfoot": ["table"],
}

HEADING_ELEMENTS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

# End tags never pop past these
BOUNDARY_ELEMENTS = frozenset({
    "applet",
    "caption",
    "html",
    "marquee",
    "object",
    "table",
    "td",
    "template",
    "th",
})

# html.parser lowercases tag names; SVG keeps camelCase local names
SVG_CASE_SENSITIVE_ELEMENTS = {
    "foreignobject": "foreignObject",
    "animatemotion": "animateMotion",
    "animatetransform": "animateTransform",
    "clippath": "clipPath",
    "feblend": "feBlend",
    "fecolormatrix": "feColorMatrix",
    "fecomponenttransfer": "feComponentTransfer",
    "fecomposite": "feComposite",
    "feconvolvematrix": "feConvolveMatrix",
    "fediffuselighting": "feDiffuseLighting",
    "fedisplacementmap": "feDisplacementMap",
    "fedistantlight": "feDistantLight",
    "fedropshadow": "feDropShadow",
    "feflood": "feFlood",
    "fefunca": "feFuncA",
    "fefuncb": "feFuncB",
    "fefuncg": "feFuncG",
    "fefuncr": "feFuncR",
    "fegaussianblur": "feGaussianBlur",
    "feimage": "feImage",
    "femerge": "feMerge",
    "femergenode": "feMergeNode",
    "femorphology": "feMorphology",
    "feoffset": "feOffset",
    "fepointlight": "fePointLight",
    "fespecularlighting": "feSpecularLighting",
    "fespotlight": "feSpotLight",
    "fetile": "feTile",
    "feturbulence": "feTurbulence",
    "lineargradient": "linearGradient",
    "radialgradient": "radialGradient",
    "textpath": "textPath",
}

# webencodings reports lowercase names; documents report the WHATWG spelling
ENCODING_DISPLAY_NAMES = {
    "utf-8": "UTF-8",
    "utf-16le": "UTF-16LE",
    "utf-16be": "UTF-16BE",
    "ibm866": "IBM866",
    "iso-8859-2": "ISO-8859-2",
    "iso-8859-3": "ISO-8859-3",
    "iso-8859-4": "ISO-8859-4",
    "iso-8859-5": "ISO-8859-5",
    "iso-8859-6": "ISO-8859-6",
    "iso-8859-7": "ISO-8859-7",
    "iso-8859-8": "ISO-8859-8",
    "iso-8859-8-i": "ISO-8859-8-I",
    "iso-8859-10": "ISO-8859-10",
    "iso-8859-13": "ISO-8859-13",
    "iso-8859-14": "ISO-8859-14",
    "iso-8859-15": "ISO-8859-15",
    "iso-8859-16": "ISO-8859-16",
    "koi8-r": "KOI8-R",
    "koi8-u": "KOI8-U",
    "big5": "Big5",
    "euc-jp": "EUC-JP",
    "iso-2022-jp": "ISO-2022-JP",
    "shift_jis": "Shift_JIS",
    "euc-kr": "EUC-KR",
}

VERSION = "0.1.0"
