"""Exceptions raised while building and using a document environment."""


class TurboDOMError(Exception):
    """Base class for every error raised by turbodom."""


class ValidationError(TurboDOMError):
    """An option was malformed or not allowed.

    ``field`` names the offending option and ``reason`` says what was wrong
    with it. Option normalization stops at the first invalid field.
    """

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(reason)

    def __repr__(self):
        return f"{type(self).__name__}(field={self.field!r}, reason={self.reason!r})"


class OptionTypeError(ValidationError, TypeError):
    """The option could not be interpreted at all (unparseable URL, conflicting flags)."""


class OptionRangeError(ValidationError, ValueError):
    """The option parsed but is not one of the accepted values."""


class ConstructionError(TurboDOMError):
    """Building the document failed; no environment was produced."""


class UsageError(TurboDOMError):
    """An environment was asked for something it was not built to provide."""
