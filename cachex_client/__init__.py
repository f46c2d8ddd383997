"""CacheX Client: a batch HTTP client for a remote multi-level cache service."""

from .client import CacheClient as CacheClient
from .config import ClientConfig as ClientConfig
from .exceptions import CacheXError as CacheXError
from .exceptions import RemoteError as RemoteError
from .exceptions import RequestTimeoutError as RequestTimeoutError
from .exceptions import SerializationError as SerializationError
from .exceptions import TransportError as TransportError
from .retry import RetryingCacheClient as RetryingCacheClient
from .retry import RetryPolicy as RetryPolicy
from .types import CacheEntry as CacheEntry
from .types import CacheEntryResult as CacheEntryResult
from .types import CacheIdentifier as CacheIdentifier
from .types import Operation as Operation

__all__ = [
    "CacheClient",
    "CacheEntry",
    "CacheEntryResult",
    "CacheIdentifier",
    "CacheXError",
    "ClientConfig",
    "Operation",
    "RemoteError",
    "RequestTimeoutError",
    "RetryPolicy",
    "RetryingCacheClient",
    "SerializationError",
    "TransportError",
]
