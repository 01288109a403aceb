"""
Utility functions for Mobcraft Storage SDK.

This module provides the pure helpers shared by the models, the request
builder and the CLI: size formatting, folder path normalization, MIME type
and file category lookup.
"""

import mimetypes
import posixpath
import re
from typing import Optional

DEFAULT_MIME_TYPE = "application/octet-stream"

# Fresh instance: built-in tables only, independent of /etc/mime.types
_MIME_TYPES = mimetypes.MimeTypes()

IMAGE_EXTENSIONS = frozenset(["jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "ico"])
VIDEO_EXTENSIONS = frozenset(["mp4", "mov", "avi", "mkv", "webm", "flv", "wmv", "m4v"])
AUDIO_EXTENSIONS = frozenset(["mp3", "wav", "ogg", "flac", "aac", "m4a", "wma"])
DOCUMENT_EXTENSIONS = frozenset([
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "rtf", "odt",
])

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')

_KB = 1024
_MB = 1024 * 1024
_GB = 1024 * 1024 * 1024


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Uses base-1024 units with one decimal place; sizes under 1 KB are
    printed as a whole number of bytes.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if size_bytes < _KB:
        return f"{size_bytes} B"
    if size_bytes < _MB:
        return f"{size_bytes / _KB:.1f} KB"
    if size_bytes < _GB:
        return f"{size_bytes / _MB:.1f} MB"
    return f"{size_bytes / _GB:.1f} GB"


def normalize_folder_path(folder: Optional[str]) -> str:
    """
    Normalize a remote folder path.

    Empty or missing paths become "/". The result always starts with "/"
    and never ends with one, except for the root itself.

    Args:
        folder: Folder path as given by the caller

    Returns:
        Normalized absolute folder path
    """
    if not folder:
        return "/"

    normalized = folder.strip()
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    if len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def get_extension(file_name: str) -> str:
    """Return the file extension without the leading dot ('' if none)."""
    ext = posixpath.splitext(file_name)[1]
    return ext[1:] if ext else ""


def get_mime_type(file_name: str) -> str:
    """
    Guess the MIME type of a file from its name.

    Unknown extensions fall back to application/octet-stream.
    """
    mime_type, _ = _MIME_TYPES.guess_type(file_name, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def resolve_mime_type(file_name: str, mime_type: Optional[str] = None) -> str:
    """Return the explicit MIME type if given, otherwise guess it from the name."""
    return mime_type or get_mime_type(file_name)


def is_image(file_name: str) -> bool:
    return get_extension(file_name).lower() in IMAGE_EXTENSIONS


def is_video(file_name: str) -> bool:
    return get_extension(file_name).lower() in VIDEO_EXTENSIONS


def is_audio(file_name: str) -> bool:
    return get_extension(file_name).lower() in AUDIO_EXTENSIONS


def is_document(file_name: str) -> bool:
    return get_extension(file_name).lower() in DOCUMENT_EXTENSIONS


def get_file_category(file_name: str) -> str:
    """
    Get the usage category of a file based on its extension.

    Returns:
        One of "images", "videos", "audio", "documents" or "other"
    """
    if is_image(file_name):
        return "images"
    if is_video(file_name):
        return "videos"
    if is_audio(file_name):
        return "audio"
    if is_document(file_name):
        return "documents"
    return "other"


def sanitize_file_name(file_name: str) -> str:
    """Replace characters that are invalid in file names with underscores."""
    return _INVALID_FILENAME_CHARS.sub("_", file_name)
