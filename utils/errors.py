"""Exceptions raised while extracting a palette."""
from typing import Optional


class PaletteExtractionError(Exception):
    """Base class for all palette extraction failures."""


class UnsupportedScheme(PaletteExtractionError):
    """URL scheme is not http or https."""

    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(f"Only HTTP and HTTPS URLs are supported (got '{scheme}')")


class TransportError(PaletteExtractionError):
    """The page itself could not be fetched.

    The message is deliberately generic; the underlying cause is chained
    via ``raise ... from`` and logged.
    """

    message = "Failed to extract colors from URL"

    def __init__(self, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(self.message)


class AccessBlocked(TransportError):
    """The remote site refused to serve the page to us."""

    message = "The website blocked the request; colors cannot be extracted from it"


class InvalidColorFormat(ValueError):
    """String is not a color literal we understand."""

    def __init__(self, value: str, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Invalid color format: {value!r}")


class UnsupportedColorSpace(InvalidColorFormat):
    """Syntactically a CSS color function, but not one we convert."""

    def __init__(self, value: str, function: str):
        self.function = function
        super().__init__(value, f"Unsupported color space '{function}()': {value!r}")
