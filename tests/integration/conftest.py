"""Integration test fixtures against a live Redis server.

By default a disposable ``redis:7-alpine`` container is started through
Docker for the session. Set NOSTRCACHE_TEST_REDIS_URL to use an existing
server instead, e.g. ``redis://localhost:6379/15``. The database is flushed
after every test. Without Docker or the variable the suite is skipped.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Iterator

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from nostrcache.cache import RedisCacheAdapter, create_redis
from tests.integration.docker_utils import RedisContainer, get_docker_client, run_redis


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = get_docker_client()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def redis_container(docker_client) -> Iterator[RedisContainer]:
    """Start a Redis container for the test session."""
    with run_redis(docker_client) as redis:
        yield redis


@pytest.fixture(scope="session")
def redis_url(request: pytest.FixtureRequest) -> str:
    """URL of the server under test, preferring NOSTRCACHE_TEST_REDIS_URL."""
    url = os.environ.get("NOSTRCACHE_TEST_REDIS_URL")
    if url:
        return url
    container: RedisContainer = request.getfixturevalue("redis_container")
    return container.url()


@pytest_asyncio.fixture
async def redis_client(redis_url: str):
    """Create a Redis client for tests."""
    client = create_redis(redis_url)
    await _wait_for_redis(client)
    yield client
    await client.flushdb()  # Clean up after each test
    await client.aclose()


@pytest_asyncio.fixture
async def live_adapter(redis_client) -> RedisCacheAdapter:
    return RedisCacheAdapter(redis_client, ttl=3600)


async def _wait_for_redis(client, timeout: float = 15.0) -> None:
    deadline = time.monotonic() + timeout
    while True:
        try:
            await client.ping()
            return
        except RedisConnectionError as exc:
            if time.monotonic() > deadline:
                pytest.skip(f"Redis not reachable: {exc}")
            await asyncio.sleep(0.2)
