"""Error taxonomy shared by handlers and the HTTP layer."""
from typing import Optional


class GeoReportError(Exception):
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(GeoReportError):
    """A required field is missing or malformed. Raised before any I/O."""

    status_code = 400


class UpstreamError(GeoReportError):
    """The reverse-geocoding service could not be reached."""


class StorageError(GeoReportError):
    """The document store failed to read or write."""

