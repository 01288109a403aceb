"""
Asynchronous Mobcraft Storage client implementation.

This module provides an async/await compatible client. Each operation is an
independent coroutine; any number of them may run concurrently over the
same client, which shares one pooled aiohttp session.
"""

from typing import Any, AsyncIterator, BinaryIO, List, Mapping, Optional, Union

from . import decoder
from . import request_builder as build
from .client import _file_object_name
from .config import StorageConfig
from .models import FileRecord, Page, QuotaStatus, TierOffering, UploadOutcome, UsageBreakdown
from .transport import AsyncTransport


class AsyncMobcraftStorage:
    """
    Asynchronous client for Mobcraft Storage.

    Provides the same operations as MobcraftStorage with async/await.
    There is no built-in cancellation or retry; wrap calls in
    asyncio.wait_for() to bound them.

    Example:
        async with AsyncMobcraftStorage(api_key="your_api_key") as storage:
            quota, tiers = await asyncio.gather(storage.get_quota(), storage.get_tiers())
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[AsyncTransport] = None,
    ):
        """
        Initialize the async Mobcraft Storage client.

        Args:
            api_key: API key for authentication (can also use MOBCRAFT_API_KEY env var)
            base_url: API root URL (can also use MOBCRAFT_BASE_URL env var)
            timeout: Request timeout in seconds
            transport: Transport to use instead of a new aiohttp-based one
        """
        self.config = StorageConfig.resolve(api_key, base_url, timeout)
        self.transport = transport or AsyncTransport(
            self.config.api_key, self.config.base_url, self.config.timeout
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def upload_bytes(
        self,
        data: Union[bytes, bytearray, memoryview],
        file_name: str,
        folder: Optional[str] = None,
        mime_type: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> UploadOutcome:
        """Upload a file from raw bytes. See MobcraftStorage.upload_bytes."""
        request = build.build_upload(data, file_name, folder, mime_type, metadata)
        return decoder.decode_data(await self.transport.send(request), UploadOutcome.from_dict)

    async def upload_file(
        self,
        file_obj: BinaryIO,
        file_name: Optional[str] = None,
        folder: Optional[str] = None,
        mime_type: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> UploadOutcome:
        """Upload the content of a binary file object."""
        file_name = file_name or _file_object_name(file_obj)
        request = build.build_upload(file_obj, file_name, folder, mime_type, metadata)
        return decoder.decode_data(await self.transport.send(request), UploadOutcome.from_dict)

    async def get_file(self, file_id: str) -> FileRecord:
        """Get metadata for a file."""
        response = await self.transport.send(build.build_get_file(file_id))
        return decoder.decode_data(response, FileRecord.from_dict)

    async def get_download_url(self, file_id: str) -> str:
        """Get a short-lived signed URL for downloading a file."""
        response = await self.transport.send(build.build_download_url(file_id))
        return decoder.decode_data(response, decoder.decode_download_url)

    async def download_file(self, file_id: str) -> bytes:
        """Download a file and return its content."""
        signed_url = await self.get_download_url(file_id)
        response = await self.transport.send(build.build_download(signed_url))
        return decoder.check_download(response)

    async def delete_file(self, file_id: str) -> None:
        """Delete a file."""
        decoder.raise_for_status(await self.transport.send(build.build_delete_file(file_id)))

    async def list_files(
        self,
        folder: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page[FileRecord]:
        """List one page of files. See MobcraftStorage.list_files."""
        request = build.build_list_files(folder, limit, offset, sort_by, sort_order)
        return decoder.decode_page(await self.transport.send(request), FileRecord.from_dict)

    async def iter_files(
        self,
        folder: Optional[str] = None,
        page_size: int = 20,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> AsyncIterator[FileRecord]:
        """Iterate over every file, fetching pages lazily until has_more is false."""
        offset = 0
        while True:
            page = await self.list_files(folder, page_size, offset, sort_by, sort_order)
            for item in page.items:
                yield item
            if not page.has_more or page.is_empty:
                return
            offset = page.next_offset

    async def get_quota(self) -> QuotaStatus:
        """Get the current quota and usage information."""
        response = await self.transport.send(build.build_quota())
        return decoder.decode_data(response, QuotaStatus.from_dict)

    async def get_usage_breakdown(self) -> UsageBreakdown:
        """Get storage usage broken down by file category."""
        response = await self.transport.send(build.build_usage_breakdown())
        return decoder.decode_data(response, UsageBreakdown.from_dict)

    async def get_tiers(self) -> List[TierOffering]:
        """Get the available pricing tiers."""
        response = await self.transport.send(build.build_tiers())
        return decoder.decode_list(response, TierOffering.from_dict)

    async def close(self):
        """Close the client session."""
        await self.transport.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
