from http.cookiejar import CookieJar

from .api import TurboDOM
from .constants import VERSION
from .encoding import DecodedMarkup, decode_markup
from .errors import ConstructionError, OptionRangeError, OptionTypeError, TurboDOMError, UsageError, ValidationError
from .options import DEFAULT_USER_AGENT, Options, Settings, normalize_options
from .treebuilder import NodeLocation
from .virtual_console import VirtualConsole

__version__ = VERSION

__all__ = [
    "DEFAULT_USER_AGENT",
    "ConstructionError",
    "CookieJar",
    "DecodedMarkup",
    "NodeLocation",
    "OptionRangeError",
    "OptionTypeError",
    "Options",
    "Settings",
    "TurboDOM",
    "TurboDOMError",
    "UsageError",
    "ValidationError",
    "VirtualConsole",
    "decode_markup",
    "normalize_options",
]
