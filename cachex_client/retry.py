"""Retry wrapper around CacheClient with jittered exponential backoff."""

import asyncio
import random
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from dataclasses import dataclass
from logging import getLogger
from typing import Any
from typing import TypeVar

from .client import CacheClient
from .exceptions import RemoteError
from .exceptions import RequestTimeoutError
from .exceptions import TransportError
from .types import CacheEntryResult
from .types import CacheIdentifier
from .types import EntryLike
from .types import IdentifierLike

T = TypeVar("T")

logger = getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry attempts."""

    total: int = 3  # retries, not counting the first attempt
    base: float = 0.1  # base backoff seconds
    cap: float = 2.0  # max backoff seconds
    jitter: bool = True  # full jitter if True

    def backoff(self, attempt: int) -> float:
        """Seconds to sleep before the retry following `attempt`."""
        delay = min(self.cap, self.base * (2**attempt))
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay


def is_retryable(exc: Exception) -> bool:
    """Retry timeouts, network failures and 5xx answers."""
    if isinstance(exc, (RequestTimeoutError, TransportError)):
        return True
    return isinstance(exc, RemoteError) and exc.status_code >= 500


class RetryingCacheClient:
    """Decorates a CacheClient with retries for failed batch calls.

    Each retry re-sends the whole batch. Store and evict are only safe to
    retry when the service applies them idempotently, which overwrite and
    delete semantics normally are.
    """

    def __init__(
        self,
        client: CacheClient,
        policy: RetryPolicy | None = None,
        retry_on: Callable[[Exception], bool] = is_retryable,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self.retry_on = retry_on

    async def _call(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await fn()
            except Exception as exc:
                if attempt >= self.policy.total or not self.retry_on(exc):
                    raise
                delay = self.policy.backoff(attempt)
                logger.info(
                    "Retrying %s after %s (attempt %d/%d, sleeping %.3fs)",
                    name,
                    exc.__class__.__name__,
                    attempt + 1,
                    self.policy.total,
                    delay,
                )
            await asyncio.sleep(delay)
            attempt += 1

    async def fetch(
        self, ids: Iterable[IdentifierLike], value_type: Any = Any
    ) -> list[CacheEntryResult[Any]]:
        batch = list(ids)
        return await self._call("fetch", lambda: self.client.fetch(batch, value_type))

    async def fetch_mapping(
        self, ids: Iterable[IdentifierLike], value_type: Any = Any
    ) -> dict[CacheIdentifier, CacheEntryResult[Any]]:
        batch = list(ids)
        return await self._call(
            "fetch_mapping", lambda: self.client.fetch_mapping(batch, value_type)
        )

    async def store(self, entries: Iterable[EntryLike[Any]]) -> None:
        batch = list(entries)
        await self._call("store", lambda: self.client.store(batch))

    async def evict(self, ids: Iterable[IdentifierLike]) -> None:
        batch = list(ids)
        await self._call("evict", lambda: self.client.evict(batch))
