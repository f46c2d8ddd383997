"""HTTP transport for cache batch operations."""

import asyncio
import gzip
from logging import getLogger

import httpx

from .config import ClientConfig
from .exceptions import RemoteError
from .exceptions import RequestTimeoutError
from .exceptions import TransportError
from .types import Operation

logger = getLogger(__name__)

_SUCCESS_CODES = frozenset({200, 204})


class HTTPTransport:
    """Send encoded batches to the cache service and classify the response.

    Every call is a single attempt with its own deadline. The deadline covers
    connecting, sending and reading the response, and the response is closed
    on every exit path, including cancellation by the caller.
    """

    def __init__(self, config: ClientConfig, http: httpx.AsyncClient) -> None:
        self.config = config
        self.http = http

    def url_for(self, operation: Operation) -> str:
        return self.config.base_url + operation.path

    def prepare_body(self, payload: bytes) -> tuple[bytes, bool]:
        """Compress the payload when it reaches the gzip threshold.

        Returns:
            The body to send and whether it was compressed
        """
        threshold = self.config.gzip_threshold
        if threshold > 0 and len(payload) >= threshold:
            return gzip.compress(payload), True
        return payload, False

    def build_request(self, operation: Operation, payload: bytes) -> httpx.Request:
        body, compressed = self.prepare_body(payload)
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }
        if compressed:
            headers["Content-Encoding"] = "gzip"

        url = self.url_for(operation)
        logger.debug(
            "Sending %s to %s (%d bytes, gzip=%s)",
            operation.name,
            url,
            len(body),
            compressed,
        )
        return self.http.build_request(
            "POST",
            url,
            content=body,
            headers=headers,
            timeout=self.config.timeout_for(operation),
        )

    async def send(self, operation: Operation, payload: bytes) -> bytes | None:
        """Execute one operation against the cache service.

        Args:
            operation: The batch operation to perform
            payload: The encoded JSON batch

        Returns:
            The response body for operations that return one, otherwise None.
            A 204 answer also yields None

        Raises:
            RequestTimeoutError: If the operation timeout elapses first
            TransportError: If the request fails below the HTTP layer
            RemoteError: If the service answers with a status other than 200 or 204
        """
        request = self.build_request(operation, payload)
        timeout = self.config.timeout_for(operation)

        try:
            body = await asyncio.wait_for(self._exchange(request), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                "%s request to %s timed out after %.3fs",
                operation.name,
                request.url,
                timeout,
            )
            msg = f"{operation.name} request timed out after {timeout}s"
            raise RequestTimeoutError(msg) from e
        except httpx.HTTPError as e:
            msg = f"{operation.name} request to {request.url} failed: {e}"
            raise TransportError(msg) from e

        return body if operation.returns_body else None

    async def _exchange(self, request: httpx.Request) -> bytes | None:
        response = await self.http.send(request, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()

        if response.status_code not in _SUCCESS_CODES:
            text = response.text.strip()
            logger.warning(
                "Cache service returned %d for %s: %s",
                response.status_code,
                request.url,
                text,
            )
            raise RemoteError(response.status_code, text)

        if response.status_code == 204:
            return None
        return body
