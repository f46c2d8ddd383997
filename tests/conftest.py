from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from support import BASE_URL

from cachex_client import CacheClient
from cachex_client import ClientConfig


@pytest_asyncio.fixture
async def cache_client() -> AsyncGenerator[CacheClient, Any]:
    """Client pointing at the mocked cache service, with a trailing slash."""
    async with CacheClient(ClientConfig(base_url=f"{BASE_URL}/")) as client:
        yield client
