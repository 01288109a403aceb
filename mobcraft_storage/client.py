"""
Synchronous Mobcraft Storage client implementation.

This module provides the main synchronous client for the Mobcraft Storage
API. Every method issues one request, decodes the response into a model and
returns it, or raises exactly one MobcraftError.
"""

from typing import Any, BinaryIO, Iterator, List, Mapping, Optional, Union

from . import decoder
from . import request_builder as build
from .config import StorageConfig
from .models import FileRecord, Page, QuotaStatus, TierOffering, UploadOutcome, UsageBreakdown
from .transport import Transport


class MobcraftStorage:
    """
    Synchronous client for Mobcraft Storage.

    Upload, download, list and delete files, and query quota and tiers.

    Example:
        with MobcraftStorage(api_key="your_api_key") as storage:
            result = storage.upload_bytes(b"hello", "hello.txt", folder="/notes")
            quota = storage.get_quota()
            print(quota.storage_used_formatted)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the Mobcraft Storage client.

        Args:
            api_key: API key for authentication (can also use MOBCRAFT_API_KEY env var)
            base_url: API root URL (can also use MOBCRAFT_BASE_URL env var)
            timeout: Request timeout in seconds
            transport: Transport to use instead of a new requests-based one
        """
        self.config = StorageConfig.resolve(api_key, base_url, timeout)
        self.transport = transport or Transport(
            self.config.api_key, self.config.base_url, self.config.timeout
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    # File operations

    def upload_bytes(
        self,
        data: Union[bytes, bytearray, memoryview],
        file_name: str,
        folder: Optional[str] = None,
        mime_type: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> UploadOutcome:
        """
        Upload a file from raw bytes.

        Args:
            data: File content
            file_name: Name for the uploaded file
            folder: Destination folder (default "/")
            mime_type: Overrides MIME type detection from file_name
            metadata: Custom metadata attached to the file

        Returns:
            UploadOutcome with the new file id and download URL

        Raises:
            QuotaExceededError: The upload would exceed the storage quota
            FileSizeLimitError: The file is too large for the current tier
        """
        request = build.build_upload(data, file_name, folder, mime_type, metadata)
        return decoder.decode_data(self.transport.send(request), UploadOutcome.from_dict)

    def upload_file(
        self,
        file_obj: BinaryIO,
        file_name: Optional[str] = None,
        folder: Optional[str] = None,
        mime_type: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> UploadOutcome:
        """
        Upload the content of a binary file object.

        The file name defaults to the base name of file_obj.name.
        """
        file_name = file_name or _file_object_name(file_obj)
        request = build.build_upload(file_obj, file_name, folder, mime_type, metadata)
        return decoder.decode_data(self.transport.send(request), UploadOutcome.from_dict)

    def get_file(self, file_id: str) -> FileRecord:
        """Get metadata for a file. Raises StorageFileNotFoundError if it doesn't exist."""
        response = self.transport.send(build.build_get_file(file_id))
        return decoder.decode_data(response, FileRecord.from_dict)

    def get_download_url(self, file_id: str) -> str:
        """Get a short-lived signed URL for downloading a file."""
        response = self.transport.send(build.build_download_url(file_id))
        return decoder.decode_data(response, decoder.decode_download_url)

    def download_file(self, file_id: str) -> bytes:
        """Download a file and return its content."""
        signed_url = self.get_download_url(file_id)
        response = self.transport.send(build.build_download(signed_url))
        return decoder.check_download(response)

    def delete_file(self, file_id: str) -> None:
        """Delete a file. Raises StorageFileNotFoundError if it doesn't exist."""
        decoder.raise_for_status(self.transport.send(build.build_delete_file(file_id)))

    def list_files(
        self,
        folder: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page[FileRecord]:
        """
        List files with pagination support.

        Args:
            folder: Only list files in this folder
            limit: Maximum number of items per page
            offset: Starting position
            sort_by: Field to sort by
            sort_order: "asc" or "desc"

        Returns:
            One Page of FileRecord; use page.next_offset to fetch the next one
        """
        request = build.build_list_files(folder, limit, offset, sort_by, sort_order)
        return decoder.decode_page(self.transport.send(request), FileRecord.from_dict)

    def iter_files(
        self,
        folder: Optional[str] = None,
        page_size: int = 20,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Iterator[FileRecord]:
        """Iterate over every file, fetching pages lazily until has_more is false."""
        offset = 0
        while True:
            page = self.list_files(folder, page_size, offset, sort_by, sort_order)
            yield from page.items
            if not page.has_more or page.is_empty:
                return
            offset = page.next_offset

    # Quota operations

    def get_quota(self) -> QuotaStatus:
        """Get the current quota and usage information."""
        response = self.transport.send(build.build_quota())
        return decoder.decode_data(response, QuotaStatus.from_dict)

    def get_usage_breakdown(self) -> UsageBreakdown:
        """Get storage usage broken down by file category."""
        response = self.transport.send(build.build_usage_breakdown())
        return decoder.decode_data(response, UsageBreakdown.from_dict)

    def get_tiers(self) -> List[TierOffering]:
        """Get the available pricing tiers."""
        response = self.transport.send(build.build_tiers())
        return decoder.decode_list(response, TierOffering.from_dict)

    def close(self):
        """Close the underlying HTTP connections."""
        self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def _file_object_name(file_obj: BinaryIO) -> str:
    name = getattr(file_obj, "name", None)
    if not isinstance(name, str) or not name:
        raise ValueError("file_name is required when uploading file-like objects without a name")
    return name.replace("\\", "/").rsplit("/", 1)[-1]
