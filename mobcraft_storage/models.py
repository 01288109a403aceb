"""
Data models for Mobcraft Storage SDK.

All models are immutable value objects decoded from the service's JSON
payloads. Each one offers from_dict() / to_dict() for the wire format
(camelCase keys) and copy_with() for field replacement.
"""

import dataclasses
import math
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, Tuple, TypeVar

from .exceptions import ErrorKind, make_error
from .utils import format_file_size, get_file_category, normalize_folder_path

T = TypeVar("T")

_MISSING = object()


def _malformed(model: str, key: str, problem: str):
    return make_error(ErrorKind.MALFORMED_PAYLOAD, message=f"{model}: field '{key}' {problem}")


def _require_mapping(model: str, data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise make_error(
            ErrorKind.MALFORMED_PAYLOAD,
            message=f"{model}: expected a JSON object, got {type(data).__name__}",
        )
    return data


def _get(model: str, data: Mapping[str, Any], key: str, required: bool) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise _malformed(model, key, "is missing")
        return None
    return value


def _str(model: str, data: Mapping[str, Any], key: str, required: bool = True) -> Optional[str]:
    value = _get(model, data, key, required)
    if value is not None and not isinstance(value, str):
        raise _malformed(model, key, "must be a string")
    return value


def _int(model: str, data: Mapping[str, Any], key: str, required: bool = True) -> Optional[int]:
    value = _get(model, data, key, required)
    if value is None:
        return None
    # bool is an int subclass; never accept it as a number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _malformed(model, key, "must be a number")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _malformed(model, key, "must be a finite number")
        # Fractional byte counts are truncated
        value = int(value)
    return value


def _float(model: str, data: Mapping[str, Any], key: str, required: bool = True) -> Optional[float]:
    value = _get(model, data, key, required)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _malformed(model, key, "must be a number")
    return float(value)


def _bool(model: str, data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = _get(model, data, key, False)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise _malformed(model, key, "must be a boolean")
    return value


def _str_list(model: str, data: Mapping[str, Any], key: str, required: bool = True) -> Tuple[str, ...]:
    value = _get(model, data, key, required)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _malformed(model, key, "must be a list of strings")
    return tuple(value)


def _datetime(model: str, data: Mapping[str, Any], key: str, required: bool = True) -> Optional[datetime]:
    value = _str(model, data, key, required)
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise _malformed(model, key, f"is not an ISO-8601 timestamp: {value!r}") from None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _freeze(value: Any) -> Any:
    """Copy a decoded JSON value into read-only containers."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    """Inverse of _freeze, producing plain JSON-serializable containers."""
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class _Replaceable:
    """Mixin adding copy_with() to frozen dataclasses."""

    def copy_with(self, **changes: Any):
        """Return a copy of this model with the given fields replaced."""
        return dataclasses.replace(self, **changes)


@dataclasses.dataclass(frozen=True, eq=False)
class FileRecord(_Replaceable):
    """Metadata of a file stored in Mobcraft Storage.

    Two records are equal when they describe the same file id.
    """

    id: str
    file_name: str
    file_size: int
    created_at: datetime
    folder: str = "/"
    mime_type: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None
    expires_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "folder", normalize_folder_path(self.folder))
        if self.metadata is not None:
            object.__setattr__(self, "metadata", _freeze(self.metadata))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileRecord":
        """Create FileRecord from API response dictionary."""
        name = "FileRecord"
        data = _require_mapping(name, data)
        metadata = _get(name, data, "metadata", False)
        if metadata is not None and not isinstance(metadata, Mapping):
            raise _malformed(name, "metadata", "must be an object")

        return cls(
            id=_str(name, data, "id"),
            file_name=_str(name, data, "fileName"),
            file_size=_int(name, data, "fileSize"),
            mime_type=_str(name, data, "mimeType", required=False),
            folder=_str(name, data, "folder", required=False) or "/",
            metadata=metadata,
            created_at=_datetime(name, data, "createdAt"),
            expires_at=_datetime(name, data, "expiresAt", required=False),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert FileRecord to its wire dictionary."""
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "folder": self.folder,
            "metadata": _thaw(self.metadata),
            "createdAt": _isoformat(self.created_at),
            "expiresAt": _isoformat(self.expires_at),
        }

    @property
    def file_size_formatted(self) -> str:
        return format_file_size(self.file_size)

    @property
    def category(self) -> str:
        """Usage category derived from the file name."""
        return get_file_category(self.file_name)

    @property
    def is_expired(self) -> bool:
        """Check if the file has passed its expiry time."""
        if self.expires_at is None:
            return False
        now = datetime.now(self.expires_at.tzinfo) if self.expires_at.tzinfo else datetime.now()
        return now > self.expires_at

    def __eq__(self, other):
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self):
        return f"FileRecord(id={self.id}, file_name={self.file_name}, file_size={self.file_size_formatted})"


@dataclasses.dataclass(frozen=True, eq=False)
class UploadOutcome(_Replaceable):
    """Result of a successful upload. Identity is the file id."""

    file_id: str
    file_name: str
    file_size: int
    download_url: str
    created_at: datetime
    folder: str = "/"
    mime_type: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "folder", normalize_folder_path(self.folder))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UploadOutcome":
        """Create UploadOutcome from API response dictionary."""
        name = "UploadOutcome"
        data = _require_mapping(name, data)
        return cls(
            file_id=_str(name, data, "fileId"),
            file_name=_str(name, data, "fileName"),
            file_size=_int(name, data, "fileSize"),
            mime_type=_str(name, data, "mimeType", required=False),
            download_url=_str(name, data, "downloadUrl"),
            folder=_str(name, data, "folder", required=False) or "/",
            created_at=_datetime(name, data, "createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert UploadOutcome to its wire dictionary."""
        return {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "downloadUrl": self.download_url,
            "folder": self.folder,
            "createdAt": _isoformat(self.created_at),
        }

    @property
    def file_size_formatted(self) -> str:
        return format_file_size(self.file_size)

    def __eq__(self, other):
        if not isinstance(other, UploadOutcome):
            return NotImplemented
        return self.file_id == other.file_id

    def __hash__(self):
        return hash(self.file_id)


@dataclasses.dataclass(frozen=True)
class QuotaStatus(_Replaceable):
    """Storage usage and limits of the current account."""

    tier: str
    storage_used: int
    storage_limit: int
    storage_percentage: float
    files_count: int
    file_size_limit: int
    features: Tuple[str, ...] = ()
    subscription_expires_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuotaStatus":
        """Create QuotaStatus from API response dictionary."""
        name = "QuotaStatus"
        data = _require_mapping(name, data)
        return cls(
            tier=_str(name, data, "tier"),
            storage_used=_int(name, data, "storageUsed"),
            storage_limit=_int(name, data, "storageLimit"),
            storage_percentage=_float(name, data, "storagePercentage"),
            files_count=_int(name, data, "filesCount"),
            file_size_limit=_int(name, data, "fileSizeLimit"),
            features=_str_list(name, data, "features"),
            subscription_expires_at=_datetime(name, data, "subscriptionExpiresAt", required=False),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert QuotaStatus to its wire dictionary."""
        return {
            "tier": self.tier,
            "storageUsed": self.storage_used,
            "storageLimit": self.storage_limit,
            "storageUsedFormatted": self.storage_used_formatted,
            "storageLimitFormatted": self.storage_limit_formatted,
            "storagePercentage": self.storage_percentage,
            "filesCount": self.files_count,
            "fileSizeLimit": self.file_size_limit,
            "fileSizeLimitFormatted": self.file_size_limit_formatted,
            "features": list(self.features),
            "subscriptionExpiresAt": _isoformat(self.subscription_expires_at),
        }

    @property
    def storage_remaining(self) -> int:
        """Bytes left before the limit (negative when over quota)."""
        return self.storage_limit - self.storage_used

    @property
    def is_almost_full(self) -> bool:
        return self.storage_percentage >= 90

    @property
    def is_full(self) -> bool:
        return self.storage_percentage >= 100

    @property
    def storage_used_formatted(self) -> str:
        return format_file_size(self.storage_used)

    @property
    def storage_limit_formatted(self) -> str:
        return format_file_size(self.storage_limit)

    @property
    def file_size_limit_formatted(self) -> str:
        return format_file_size(self.file_size_limit)


@dataclasses.dataclass(frozen=True)
class TierOffering(_Replaceable):
    """A service plan available to the account.

    A price of 0 means free; a negative price means custom pricing
    (contact sales).
    """

    id: str
    name: str
    storage_limit: int
    file_size_limit: int
    price: float
    currency: str = "USD"
    billing_period: str = "monthly"
    features: Tuple[str, ...] = ()
    is_popular: bool = False
    is_current: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TierOffering":
        """Create TierOffering from API response dictionary."""
        name = "TierOffering"
        data = _require_mapping(name, data)
        tier_id = _str(name, data, "id")
        return cls(
            id=tier_id,
            name=_str(name, data, "name", required=False) or tier_id.upper(),
            storage_limit=_int(name, data, "storageLimit"),
            file_size_limit=_int(name, data, "fileSizeLimit"),
            price=_float(name, data, "price"),
            currency=_str(name, data, "currency", required=False) or "USD",
            billing_period=_str(name, data, "billingPeriod", required=False) or "monthly",
            features=_str_list(name, data, "features", required=False),
            is_popular=_bool(name, data, "isPopular"),
            is_current=_bool(name, data, "isCurrent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert TierOffering to its wire dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "storageLimit": self.storage_limit,
            "storageLimitFormatted": self.storage_limit_formatted,
            "fileSizeLimit": self.file_size_limit,
            "fileSizeLimitFormatted": self.file_size_limit_formatted,
            "price": self.price,
            "currency": self.currency,
            "billingPeriod": self.billing_period,
            "features": list(self.features),
            "isPopular": self.is_popular,
            "isCurrent": self.is_current,
        }

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def is_custom(self) -> bool:
        return self.price < 0

    @property
    def price_formatted(self) -> str:
        """Display price, e.g. "Free", "Custom" or "USD 9.99/monthly"."""
        if self.is_free:
            return "Free"
        if self.is_custom:
            return "Custom"
        return f"{self.currency} {self.price:.2f}/{self.billing_period}"

    @property
    def storage_limit_formatted(self) -> str:
        return format_file_size(self.storage_limit)

    @property
    def file_size_limit_formatted(self) -> str:
        return format_file_size(self.file_size_limit)


@dataclasses.dataclass(frozen=True)
class CategoryUsage(_Replaceable):
    """Usage of one file category."""

    size: int
    count: int
    percentage: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CategoryUsage":
        name = "CategoryUsage"
        data = _require_mapping(name, data)
        return cls(
            size=_int(name, data, "size"),
            count=_int(name, data, "count"),
            percentage=_float(name, data, "percentage"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "sizeFormatted": self.size_formatted,
            "count": self.count,
            "percentage": self.percentage,
        }

    @property
    def size_formatted(self) -> str:
        return format_file_size(self.size)


@dataclasses.dataclass(frozen=True)
class UsageBreakdown(_Replaceable):
    """Storage usage split by file category (images, documents, ...)."""

    total_size: int
    total_files: int
    categories: Mapping[str, CategoryUsage] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UsageBreakdown":
        """Create UsageBreakdown from API response dictionary."""
        name = "UsageBreakdown"
        data = _require_mapping(name, data)
        raw_categories = _get(name, data, "categories", True)
        if not isinstance(raw_categories, Mapping):
            raise _malformed(name, "categories", "must be an object")

        return cls(
            total_size=_int(name, data, "totalSize"),
            total_files=_int(name, data, "totalFiles"),
            categories={
                key: CategoryUsage.from_dict(value) for key, value in raw_categories.items()
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert UsageBreakdown to its wire dictionary."""
        return {
            "totalSize": self.total_size,
            "totalSizeFormatted": self.total_size_formatted,
            "totalFiles": self.total_files,
            "categories": {key: value.to_dict() for key, value in self.categories.items()},
        }

    @property
    def total_size_formatted(self) -> str:
        return format_file_size(self.total_size)

    def __hash__(self):
        return hash((self.total_size, self.total_files, tuple(sorted(self.categories.items()))))


@dataclasses.dataclass(frozen=True)
class Page(_Replaceable, Generic[T]):
    """
    One page of a paginated listing.

    The page is agnostic of its item type: decoding takes an item decoder
    alongside the raw payload, encoding takes an item encoder.
    """

    items: Tuple[T, ...]
    total: int
    limit: int
    offset: int
    has_more: bool

    def __post_init__(self):
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must not be negative, got {self.offset}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], item_decoder: Callable[[Any], T]) -> "Page[T]":
        """
        Create a Page from API response dictionary.

        Args:
            data: The raw page payload
            item_decoder: Function decoding one raw item (e.g. FileRecord.from_dict)
        """
        name = "Page"
        data = _require_mapping(name, data)
        raw_items = _get(name, data, "items", True)
        if not isinstance(raw_items, list):
            raise _malformed(name, "items", "must be a list")

        limit = _int(name, data, "limit")
        offset = _int(name, data, "offset")
        if limit <= 0:
            raise _malformed(name, "limit", "must be positive")
        if offset < 0:
            raise _malformed(name, "offset", "must not be negative")
        has_more = _get(name, data, "hasMore", True)
        if not isinstance(has_more, bool):
            raise _malformed(name, "hasMore", "must be a boolean")

        return cls(
            items=tuple(item_decoder(item) for item in raw_items),
            total=_int(name, data, "total"),
            limit=limit,
            offset=offset,
            has_more=has_more,
        )

    def to_dict(self, item_encoder: Callable[[T], Any]) -> Dict[str, Any]:
        """Convert the page to its wire dictionary using item_encoder for each item."""
        return {
            "items": [item_encoder(item) for item in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }

    @property
    def current_page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def is_first_page(self) -> bool:
        return self.offset == 0

    @property
    def is_last_page(self) -> bool:
        return not self.has_more

    @property
    def next_offset(self) -> int:
        return self.offset + self.limit

    @property
    def previous_offset(self) -> int:
        return min(max(self.offset - self.limit, 0), self.total)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __str__(self):
        return f"Page(items={len(self.items)}, total={self.total}, page={self.current_page}/{self.total_pages})"

