"""
Custom exceptions for Mobcraft Storage SDK.

Every failure the SDK reports is a MobcraftError carrying a human-readable
message, a machine-readable code and, when it came from an HTTP response,
the status code. The set of error kinds is closed (see ErrorKind); each kind
has its own subclass so callers can catch precisely, and its own default
payload so a bare error is still meaningful.

Errors are built through make_error() rather than by instantiating the
subclasses directly, which keeps the kind -> class dispatch in one place.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type


class ErrorKind(Enum):
    """Closed set of error kinds."""
    AUTHENTICATION = "authentication"
    QUOTA_EXCEEDED = "quota_exceeded"
    FILE_SIZE_LIMIT = "file_size_limit"
    FILE_NOT_FOUND = "file_not_found"
    BAD_REQUEST = "bad_request"
    RATE_LIMITED = "rate_limited"
    SERVER_FAULT = "server_fault"
    NETWORK = "network"
    GENERIC = "generic"
    MALFORMED_PAYLOAD = "malformed_payload"


class MobcraftError(Exception):
    """Base exception for all Mobcraft Storage SDK errors.

    Also used as-is for the GENERIC kind: any HTTP failure that does not
    match a more specific kind, carrying the literal status code.
    """

    kind = ErrorKind.GENERIC
    default_message = "An error occurred"
    default_code = "UNKNOWN_ERROR"
    default_status_code: Optional[int] = None

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code if status_code is not None else self.default_status_code
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.code}] {self.message}"

    def __repr__(self):
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code!r})"
        )


class AuthenticationError(MobcraftError):
    """Raised when the API key is missing, invalid or expired."""

    kind = ErrorKind.AUTHENTICATION
    default_message = "Authentication failed. Please check your API key."
    default_code = "AUTHENTICATION_ERROR"
    default_status_code = 401


class QuotaExceededError(MobcraftError):
    """Raised when an upload would exceed the account's storage quota."""

    kind = ErrorKind.QUOTA_EXCEEDED
    default_message = "Storage quota exceeded. Please upgrade your plan or delete some files."
    default_code = "QUOTA_EXCEEDED"
    default_status_code = 413


class FileSizeLimitError(MobcraftError):
    """Raised when a single file is larger than the current tier allows."""

    kind = ErrorKind.FILE_SIZE_LIMIT
    default_message = "File size exceeds the maximum allowed limit for your tier."
    default_code = "FILE_SIZE_LIMIT"
    default_status_code = 413


class StorageFileNotFoundError(MobcraftError):
    """Raised when the requested file does not exist on the service."""

    kind = ErrorKind.FILE_NOT_FOUND
    default_message = "The requested file was not found."
    default_code = "FILE_NOT_FOUND"
    default_status_code = 404


class BadRequestError(MobcraftError):
    """Raised when the service rejects the request as malformed."""

    kind = ErrorKind.BAD_REQUEST
    default_message = "The request was invalid."
    default_code = "BAD_REQUEST"
    default_status_code = 400


class RateLimitError(MobcraftError):
    """Raised when API rate limit is exceeded."""

    kind = ErrorKind.RATE_LIMITED
    default_message = "Rate limit exceeded. Please try again later."
    default_code = "RATE_LIMIT"
    default_status_code = 429

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(message, code, status_code)
        self.retry_after = retry_after


class ServerError(MobcraftError):
    """Raised when the service answers with a 5xx status."""

    kind = ErrorKind.SERVER_FAULT
    default_message = "An unexpected server error occurred."
    default_code = "SERVER_ERROR"
    default_status_code = 500


class NetworkError(MobcraftError):
    """Raised when the request never produced a usable HTTP response.

    Covers DNS failures, refused connections, timeouts and malformed HTTP.
    """

    kind = ErrorKind.NETWORK
    default_message = "A network error occurred. Please check your internet connection."
    default_code = "NETWORK_ERROR"


class MalformedPayloadError(MobcraftError):
    """Raised when a response body does not have the expected shape."""

    kind = ErrorKind.MALFORMED_PAYLOAD
    default_message = "The server response could not be decoded."
    default_code = "MALFORMED_PAYLOAD"


_ERROR_CLASSES: Dict[ErrorKind, Type[MobcraftError]] = {
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.QUOTA_EXCEEDED: QuotaExceededError,
    ErrorKind.FILE_SIZE_LIMIT: FileSizeLimitError,
    ErrorKind.FILE_NOT_FOUND: StorageFileNotFoundError,
    ErrorKind.BAD_REQUEST: BadRequestError,
    ErrorKind.RATE_LIMITED: RateLimitError,
    ErrorKind.SERVER_FAULT: ServerError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.GENERIC: MobcraftError,
    ErrorKind.MALFORMED_PAYLOAD: MalformedPayloadError,
}


def error_class(kind: ErrorKind) -> Type[MobcraftError]:
    """Return the exception class raised for an error kind."""
    return _ERROR_CLASSES[kind]


def make_error(
    kind: ErrorKind,
    message: Optional[str] = None,
    code: Optional[str] = None,
    status_code: Optional[int] = None,
    **extra: Any,
) -> MobcraftError:
    """
    Build the error for a kind, filling unset fields with the kind's defaults.

    Args:
        kind: Error kind to build
        message: Human-readable message
        code: Machine-readable code
        status_code: HTTP status, when the error came from a response
        **extra: Kind-specific attributes (e.g. retry_after for RATE_LIMITED)

    Returns:
        An instance of the kind's exception class (not raised)
    """
    return _ERROR_CLASSES[kind](message=message, code=code, status_code=status_code, **extra)
