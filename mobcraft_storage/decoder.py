"""
Response decoding for Mobcraft Storage SDK.

Successful API responses are JSON envelopes of the form {"data": ...}.
Failed ones carry {"message": ..., "code": ...}. This module turns a
RawResponse into either a domain model or exactly one raised MobcraftError.
"""

import json
from typing import Any, Callable, List, Mapping, Optional, Tuple, TypeVar

from .exceptions import ErrorKind, MobcraftError, make_error
from .models import Page
from .transport import RawResponse

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "An error occurred"
DEFAULT_ERROR_CODE = "UNKNOWN_ERROR"
QUOTA_EXCEEDED_CODE = "QUOTA_EXCEEDED"

_STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.AUTHENTICATION,
    404: ErrorKind.FILE_NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}


def parse_error_body(content: bytes) -> Tuple[str, str]:
    """
    Read message and code from an error body.

    Bodies that are not a JSON object degrade to the generic defaults
    instead of failing; missing or non-string keys default individually.
    """
    try:
        payload = json.loads(content.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return DEFAULT_ERROR_MESSAGE, DEFAULT_ERROR_CODE

    if not isinstance(payload, Mapping):
        return DEFAULT_ERROR_MESSAGE, DEFAULT_ERROR_CODE

    message = payload.get("message")
    code = payload.get("code")
    return (
        message if isinstance(message, str) else DEFAULT_ERROR_MESSAGE,
        code if isinstance(code, str) else DEFAULT_ERROR_CODE,
    )


def _retry_after(response: RawResponse) -> Optional[int]:
    value = response.header("Retry-After")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def error_kind_for(status_code: int, code: str) -> ErrorKind:
    """
    Select the error kind for a failed response.

    Status decides first; 413 is further split on the server code into
    quota exhaustion versus a per-file size limit.
    """
    if status_code == 413:
        if code == QUOTA_EXCEEDED_CODE:
            return ErrorKind.QUOTA_EXCEEDED
        return ErrorKind.FILE_SIZE_LIMIT
    if status_code >= 500:
        return ErrorKind.SERVER_FAULT
    return _STATUS_KINDS.get(status_code, ErrorKind.GENERIC)


def error_from_response(response: RawResponse) -> MobcraftError:
    """Build (but do not raise) the error for a non-2xx response."""
    message, code = parse_error_body(response.content)
    kind = error_kind_for(response.status_code, code)
    extra = {}
    if kind is ErrorKind.RATE_LIMITED:
        extra["retry_after"] = _retry_after(response)
    return make_error(kind, message=message, code=code, status_code=response.status_code, **extra)


def raise_for_status(response: RawResponse) -> None:
    """Raise the mapped MobcraftError unless the response is 2xx."""
    if not response.ok:
        raise error_from_response(response)


def parse_envelope(response: RawResponse) -> Any:
    """Check the status, parse the JSON body and return its "data" member."""
    raise_for_status(response)
    try:
        payload = json.loads(response.content.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise make_error(
            ErrorKind.MALFORMED_PAYLOAD,
            message=f"Response body is not valid JSON: {e}",
            status_code=response.status_code,
        ) from e

    if not isinstance(payload, Mapping) or "data" not in payload:
        raise make_error(
            ErrorKind.MALFORMED_PAYLOAD,
            message="Response envelope has no 'data' field",
            status_code=response.status_code,
        )
    return payload["data"]


def decode_data(response: RawResponse, decoder: Callable[[Any], T]) -> T:
    """Unwrap the envelope and decode its payload with decoder."""
    return decoder(parse_envelope(response))


def decode_page(response: RawResponse, item_decoder: Callable[[Any], T]) -> Page[T]:
    """Unwrap the envelope and decode a paginated payload."""
    return Page.from_dict(parse_envelope(response), item_decoder)


def decode_list(response: RawResponse, item_decoder: Callable[[Any], T]) -> List[T]:
    """Unwrap the envelope and decode a JSON list payload."""
    data = parse_envelope(response)
    if not isinstance(data, list):
        raise make_error(
            ErrorKind.MALFORMED_PAYLOAD,
            message=f"Expected a JSON list, got {type(data).__name__}",
        )
    return [item_decoder(item) for item in data]


def decode_download_url(data: Any) -> str:
    """Decode the {"url": ...} payload of the download-url endpoint."""
    url = data.get("url") if isinstance(data, Mapping) else None
    if not isinstance(url, str) or not url:
        raise make_error(ErrorKind.MALFORMED_PAYLOAD, message="Download URL payload has no 'url'")
    return url


def check_download(response: RawResponse) -> bytes:
    """
    Validate the signed-URL download response.

    This request bypasses the API, so any status other than 200 is reported
    as a NetworkError rather than mapped through the API error kinds.
    """
    if response.status_code != 200:
        raise make_error(
            ErrorKind.NETWORK,
            message=f"Failed to download file: {response.status_code}",
            status_code=response.status_code,
        )
    return response.content
