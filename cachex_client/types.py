"""Type definitions and type aliases for CacheX Client."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic
from typing import TypeVar
from typing import Union

T = TypeVar("T")

# Wire field names, kept short since batches may be large
FIELD_CACHE_NAME = "c"
FIELD_KEY = "k"
FIELD_VALUE = "v"
FIELD_FOUND = "f"


class Operation(Enum):
    """Batch operations understood by the cache service.

    Each member carries its endpoint path and whether the response body is
    handed back to the caller.
    """

    FETCH = ("/api/v1/cache/get_all", True)
    STORE = ("/api/v1/cache/put_all", False)
    EVICT = ("/api/v1/cache/evict_all", False)

    def __init__(self, path: str, returns_body: bool) -> None:
        self.path = path
        self.returns_body = returns_body


@dataclass(frozen=True)
class CacheIdentifier:
    """Identifies one entry within one named cache."""

    cache_name: str
    key: str


@dataclass
class CacheEntry(Generic[T]):
    """A value to be stored under a cache name and key."""

    cache_name: str
    key: str
    value: T

    @property
    def identifier(self) -> CacheIdentifier:
        return CacheIdentifier(self.cache_name, self.key)


@dataclass
class CacheEntryResult(Generic[T]):
    """Result of fetching one entry.

    Args:
        cache_name: Name of the cache the entry belongs to
        key: Key of the entry
        value: The decoded value, or None when the entry was not found
        found: Whether the key existed in the cache at read time
    """

    cache_name: str
    key: str
    value: T | None
    found: bool

    @property
    def identifier(self) -> CacheIdentifier:
        return CacheIdentifier(self.cache_name, self.key)


IdentifierLike = Union[CacheIdentifier, tuple[str, str]]
EntryLike = Union[CacheEntry[T], tuple[str, str, T]]
