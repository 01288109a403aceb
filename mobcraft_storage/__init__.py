"""
Mobcraft Storage SDK - Python client for the Mobcraft Storage service.

This package provides:
- File upload/download/list/delete
- Quota, usage breakdown and pricing tier information
- Typed, immutable models for every API payload
- A structured error taxonomy for HTTP and network failures
- Sync (requests) and async (aiohttp) clients
"""

import logging

__version__ = "1.0.0"

from .client import MobcraftStorage
from .async_client import AsyncMobcraftStorage
from .config import StorageConfig
from .models import (
    FileRecord,
    UploadOutcome,
    QuotaStatus,
    TierOffering,
    UsageBreakdown,
    CategoryUsage,
    Page,
)
from .exceptions import (
    ErrorKind,
    MobcraftError,
    AuthenticationError,
    QuotaExceededError,
    FileSizeLimitError,
    StorageFileNotFoundError,
    BadRequestError,
    RateLimitError,
    ServerError,
    NetworkError,
    MalformedPayloadError,
    make_error,
)
from .utils import format_file_size, normalize_folder_path, get_mime_type

# Library logging stays silent unless the application configures it
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Main clients
    "MobcraftStorage",
    "AsyncMobcraftStorage",
    "StorageConfig",

    # Data models
    "FileRecord",
    "UploadOutcome",
    "QuotaStatus",
    "TierOffering",
    "UsageBreakdown",
    "CategoryUsage",
    "Page",

    # Exceptions
    "ErrorKind",
    "MobcraftError",
    "AuthenticationError",
    "QuotaExceededError",
    "FileSizeLimitError",
    "StorageFileNotFoundError",
    "BadRequestError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "MalformedPayloadError",
    "make_error",

    # Helpers
    "format_file_size",
    "normalize_folder_path",
    "get_mime_type",
]
