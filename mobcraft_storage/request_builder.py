"""
Request construction for the Mobcraft Storage API.

Each public client operation is turned into an ApiRequest here: method,
path, query parameters, multipart form fields and the optional file part.
ApiRequest is transport-neutral; the sync and async transports render the
same value with requests and aiohttp respectively.
"""

import json
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Mapping, Optional, Union
from urllib.parse import quote

from .utils import normalize_folder_path, resolve_mime_type

API_PREFIX = "/api/v1"

SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class FilePart:
    """The single file part of a multipart upload."""

    field_name: str
    file_name: str
    content: bytes
    content_type: str

    def __repr__(self):
        # Keep payload bytes out of logs and tracebacks
        return (
            f"FilePart(field_name={self.field_name!r}, file_name={self.file_name!r}, "
            f"content=<{len(self.content)} bytes>, content_type={self.content_type!r})"
        )


@dataclass(frozen=True)
class ApiRequest:
    """A transport-ready request.

    `path` is relative to the client's base URL unless `absolute` is set, in
    which case it is a full URL (signed download links).
    """

    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, str] = field(default_factory=dict)
    file: Optional[FilePart] = None
    authenticated: bool = True
    absolute: bool = False

    @property
    def is_multipart(self) -> bool:
        return self.file is not None

    def url(self, base_url: str) -> str:
        """Full URL of this request (without query string)."""
        if self.absolute:
            return self.path
        return f"{base_url.rstrip('/')}{self.path}"


def _file_path(file_id: str, suffix: str = "") -> str:
    if not file_id:
        raise ValueError("file_id must not be empty")
    return f"{API_PREFIX}/files/{quote(str(file_id), safe='')}{suffix}"


def read_content(data: Union[bytes, bytearray, memoryview, BinaryIO]) -> bytes:
    """Return upload content as bytes, reading file-like objects to the end."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if hasattr(data, "read"):
        content = data.read()
        if not isinstance(content, bytes):
            raise TypeError("file objects must be opened in binary mode")
        return content
    raise TypeError(f"Unsupported upload content type: {type(data).__name__}")


def build_upload(
    data: Union[bytes, bytearray, memoryview, BinaryIO],
    file_name: str,
    folder: Optional[str] = None,
    mime_type: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> ApiRequest:
    """
    Build the multipart upload request.

    Args:
        data: File content as bytes or a binary file-like object
        file_name: Name the file is stored under
        folder: Destination folder (normalized; defaults to "/")
        mime_type: Explicit content type; guessed from file_name when omitted
        metadata: Custom metadata, sent JSON-encoded when non-empty

    Returns:
        ApiRequest for POST /files
    """
    if not file_name:
        raise ValueError("file_name must not be empty")

    fields = {"folder": normalize_folder_path(folder)}
    if metadata:
        fields["metadata"] = json.dumps(dict(metadata))

    file_part = FilePart(
        field_name="file",
        file_name=file_name,
        content=read_content(data),
        content_type=resolve_mime_type(file_name, mime_type),
    )
    return ApiRequest("POST", f"{API_PREFIX}/files", fields=fields, file=file_part)


def build_get_file(file_id: str) -> ApiRequest:
    return ApiRequest("GET", _file_path(file_id))


def build_download_url(file_id: str) -> ApiRequest:
    return ApiRequest("GET", _file_path(file_id, "/download-url"))


def build_download(signed_url: str) -> ApiRequest:
    """GET against a signed download URL; sent without API credentials."""
    if not signed_url:
        raise ValueError("signed_url must not be empty")
    return ApiRequest("GET", signed_url, authenticated=False, absolute=True)


def build_delete_file(file_id: str) -> ApiRequest:
    return ApiRequest("DELETE", _file_path(file_id))


def build_list_files(
    folder: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> ApiRequest:
    """
    Build the file listing request.

    limit, offset, sort_by and sort_order are always sent; folder only
    when supplied.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"sort_order must be one of {SORT_ORDERS}, got {sort_order!r}")

    params = {
        "limit": str(limit),
        "offset": str(offset),
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    if folder is not None:
        params["folder"] = normalize_folder_path(folder)

    return ApiRequest("GET", f"{API_PREFIX}/files", params=params)


def build_quota() -> ApiRequest:
    return ApiRequest("GET", f"{API_PREFIX}/quota")


def build_usage_breakdown() -> ApiRequest:
    return ApiRequest("GET", f"{API_PREFIX}/quota/breakdown")


def build_tiers() -> ApiRequest:
    return ApiRequest("GET", f"{API_PREFIX}/tiers")
