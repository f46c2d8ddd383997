"""Client for the multi-level cache service."""

from collections.abc import Iterable
from types import TracebackType
from typing import Any
from typing import TypeVar
from typing import overload

import httpx

from . import codec
from .config import ClientConfig
from .transport import HTTPTransport
from .types import CacheEntryResult
from .types import CacheIdentifier
from .types import EntryLike
from .types import IdentifierLike
from .types import Operation

T = TypeVar("T")


class CacheClient:
    """Batch client for a remote named cache service.

    The client keeps no state between calls besides its configuration and
    HTTP client, so one instance can be shared by any number of tasks.
    """

    def __init__(
        self, config: ClientConfig, *, http: httpx.AsyncClient | None = None
    ) -> None:
        self.config = config
        self._owns_http = http is None
        self._http = http if http is not None else httpx.AsyncClient()
        self._transport = HTTPTransport(config, self._http)

    @classmethod
    def from_url(
        cls, base_url: str, *, http: httpx.AsyncClient | None = None, **options: Any
    ) -> "CacheClient":
        """Create a client from a base URL and optional config fields."""
        return cls(ClientConfig(base_url=base_url, **options), http=http)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> "CacheClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @overload
    async def fetch(
        self, ids: Iterable[IdentifierLike]
    ) -> list[CacheEntryResult[Any]]: ...

    @overload
    async def fetch(
        self, ids: Iterable[IdentifierLike], value_type: type[T]
    ) -> list[CacheEntryResult[T]]: ...

    async def fetch(
        self, ids: Iterable[IdentifierLike], value_type: Any = Any
    ) -> list[CacheEntryResult[Any]]:
        """Fetch a batch of entries.

        Args:
            ids: Identifiers (or ``(cache_name, key)`` pairs) to look up
            value_type: Type that found values are decoded into

        Returns:
            One result per entry the service reported, in the service's
            order. Missing entries have ``found=False`` and a None value.
        """
        payload = codec.encode_identifiers(ids)
        body = await self._transport.send(Operation.FETCH, payload)
        if body is None:
            return []
        return codec.decode_results(body, value_type)

    async def fetch_mapping(
        self, ids: Iterable[IdentifierLike], value_type: Any = Any
    ) -> dict[CacheIdentifier, CacheEntryResult[Any]]:
        """Fetch a batch of entries keyed by their identifier.

        Use this instead of :meth:`fetch` when the result order must not be
        relied on.
        """
        results = await self.fetch(ids, value_type)
        return {result.identifier: result for result in results}

    async def store(self, entries: Iterable[EntryLike[Any]]) -> None:
        """Store a batch of entries.

        Values are serialized one by one, so a batch may mix value types.
        """
        payload = codec.encode_entries(entries)
        await self._transport.send(Operation.STORE, payload)

    async def evict(self, ids: Iterable[IdentifierLike]) -> None:
        """Evict a batch of entries."""
        payload = codec.encode_identifiers(ids)
        await self._transport.send(Operation.EVICT, payload)
