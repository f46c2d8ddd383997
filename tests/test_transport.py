"""Tests for the HTTP transport: compression, deadlines and status handling."""

import asyncio
import gzip
from collections.abc import AsyncIterator

import httpx
import pytest
from support import BASE_URL

from cachex_client.config import ClientConfig
from cachex_client.exceptions import RemoteError
from cachex_client.exceptions import RequestTimeoutError
from cachex_client.exceptions import TransportError
from cachex_client.transport import HTTPTransport
from cachex_client.types import Operation


class SlowStream(httpx.AsyncByteStream):
    """Response body that takes a while to arrive and records being closed."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        await asyncio.sleep(self.delay)
        yield b"[]"

    async def aclose(self) -> None:
        self.closed = True


def make_transport(handler, **options) -> HTTPTransport:
    config = ClientConfig(base_url=BASE_URL, **options)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HTTPTransport(config, http)


class TestGzipThreshold:
    def test_payload_at_threshold_is_compressed(self):
        transport = make_transport(lambda r: httpx.Response(204), gzip_threshold=16)
        payload = b"x" * 16
        body, compressed = transport.prepare_body(payload)
        assert compressed is True
        assert gzip.decompress(body) == payload

    def test_payload_below_threshold_is_plain(self):
        transport = make_transport(lambda r: httpx.Response(204), gzip_threshold=16)
        payload = b"x" * 15
        assert transport.prepare_body(payload) == (payload, False)

    def test_zero_threshold_never_compresses(self):
        transport = make_transport(lambda r: httpx.Response(204), gzip_threshold=0)
        payload = b"x" * 100_000
        assert transport.prepare_body(payload) == (payload, False)

    @pytest.mark.asyncio
    async def test_compressed_request_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        transport = make_transport(handler, gzip_threshold=10)
        payload = b'[{"c":"users","k":"1"}]'
        await transport.send(Operation.EVICT, payload)

        request = seen[0]
        assert request.headers["Content-Encoding"] == "gzip"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Content-Length"] == str(len(request.content))
        assert gzip.decompress(request.content) == payload

    @pytest.mark.asyncio
    async def test_plain_request_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        transport = make_transport(handler, gzip_threshold=1024)
        payload = b'[{"c":"users","k":"1"}]'
        await transport.send(Operation.EVICT, payload)

        request = seen[0]
        assert "Content-Encoding" not in request.headers
        assert request.headers["Content-Length"] == str(len(payload))
        assert request.content == payload


class TestRouting:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("operation", "path"),
        [
            (Operation.FETCH, "/api/v1/cache/get_all"),
            (Operation.STORE, "/api/v1/cache/put_all"),
            (Operation.EVICT, "/api/v1/cache/evict_all"),
        ],
    )
    async def test_operation_paths(self, operation: Operation, path: str):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"[]")

        await make_transport(handler).send(operation, b"[]")
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{BASE_URL}{path}"


class TestStatusClassification:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", list(Operation))
    @pytest.mark.parametrize("status", [200, 204])
    async def test_success_codes(self, operation: Operation, status: int):
        content = b"[]" if status == 200 else b""
        transport = make_transport(lambda r: httpx.Response(status, content=content))
        result = await transport.send(operation, b"[]")
        if operation.returns_body and status == 200:
            assert result == content
        else:
            assert result is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", list(Operation))
    async def test_server_error(self, operation: Operation):
        transport = make_transport(
            lambda r: httpx.Response(500, content=b"  cache tier unavailable \n")
        )
        with pytest.raises(RemoteError) as exc_info:
            await transport.send(operation, b"[]")

        error = exc_info.value
        assert error.status_code == 500
        assert error.body == "cache tier unavailable"
        assert "500" in str(error)
        assert "cache tier unavailable" in str(error)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [201, 304, 400, 404, 503])
    async def test_other_codes_are_errors(self, status: int):
        transport = make_transport(lambda r: httpx.Response(status))
        with pytest.raises(RemoteError) as exc_info:
            await transport.send(Operation.STORE, b"[]")
        assert exc_info.value.status_code == status


class TestDeadline:
    @pytest.mark.asyncio
    async def test_slow_response_times_out(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, content=b"[]")

        transport = make_transport(handler, fetch_timeout=0.05)
        with pytest.raises(RequestTimeoutError) as exc_info:
            await transport.send(Operation.FETCH, b"[]")
        assert isinstance(exc_info.value, TimeoutError)

    @pytest.mark.asyncio
    async def test_slow_body_is_closed_on_timeout(self):
        stream = SlowStream(delay=1)
        transport = make_transport(
            lambda r: httpx.Response(200, stream=stream), fetch_timeout=0.05
        )
        with pytest.raises(RequestTimeoutError):
            await transport.send(Operation.FETCH, b"[]")
        assert stream.closed

    @pytest.mark.asyncio
    async def test_timeouts_are_per_operation(self):
        stream_delay = 0.2

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204, stream=SlowStream(delay=stream_delay))

        transport = make_transport(
            handler, fetch_timeout=0.05, store_timeout=2.0, evict_timeout=0.05
        )
        assert await transport.send(Operation.STORE, b"[]") is None
        with pytest.raises(RequestTimeoutError):
            await transport.send(Operation.EVICT, b"[]")

    @pytest.mark.asyncio
    async def test_caller_cancellation_closes_body(self):
        stream = SlowStream(delay=1)
        transport = make_transport(
            lambda r: httpx.Response(200, stream=stream), fetch_timeout=5.0
        )
        task = asyncio.create_task(transport.send(Operation.FETCH, b"[]"))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert stream.closed

    @pytest.mark.asyncio
    async def test_body_is_closed_on_remote_error(self):
        stream = SlowStream(delay=0)
        transport = make_transport(lambda r: httpx.Response(500, stream=stream))
        with pytest.raises(RemoteError):
            await transport.send(Operation.STORE, b"[]")
        assert stream.closed


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(handler)
    with pytest.raises(TransportError) as exc_info:
        await transport.send(Operation.FETCH, b"[]")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
