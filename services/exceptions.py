"""
Domain exceptions raised by the service layer.

The API layer translates these into HTTP responses (see api/main.py).
"""


class WmsError(Exception):
    """Base class for catalog errors."""


class DuplicateProductError(WmsError):
    """A product with the same article and size already exists."""


class UploadFormatError(WmsError):
    """An uploaded spreadsheet has a disallowed extension or an unusable layout."""


class UploadTooLargeError(WmsError):
    """An uploaded spreadsheet exceeds the configured size limit."""
