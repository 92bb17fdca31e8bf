"""
Exceptions raised by the dBUS API client.

Every error the package raises derives from DbusError, so callers can catch
the whole family at once or pick the specific failure they care about.
"""

from typing import Optional


class DbusError(Exception):
    """Base exception for dBUS client errors."""

    pass


class ConfigurationError(DbusError, ValueError):
    """Invalid client configuration or request argument (e.g. language code)."""

    pass


class ApiConnectionError(DbusError):
    """The request never produced an HTTP response."""

    status_code: Optional[int] = None


class ResponseParseError(DbusError):
    """A 2xx response whose body could not be turned into the expected model."""

    def __init__(self, message: str, response_body: str = "") -> None:
        super().__init__(message)
        self.response_body = response_body


class ApiError(DbusError):
    """
    The service answered with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the service
        response_body: Raw response text, for diagnostics
    """

    def __init__(self, message: str, status_code: int, response_body: str = "") -> None:
        super().__init__(f"{message} (status code: {status_code})")
        self.status_code = status_code
        self.response_body = response_body


class BadRequestError(ApiError):
    pass


class UnauthorizedError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ServerError(ApiError):
    pass


class ExportError(DbusError):
    """Base exception for tabular export errors."""

    pass


_STATUS_ERRORS = {
    400: (BadRequestError, "Bad Request"),
    401: (UnauthorizedError, "Unauthorized"),
    404: (NotFoundError, "Not Found"),
    500: (ServerError, "Internal Server Error"),
}


def error_for_status(status_code: int, response_body: str = "") -> ApiError:
    """
    Build the ApiError subclass matching an HTTP status code.

    Unmapped codes fall back to a plain ApiError.
    """
    error_cls, message = _STATUS_ERRORS.get(status_code, (ApiError, "API Error"))
    return error_cls(message, status_code, response_body)
