"""Global pytest configuration and fixtures.

Provides an in-memory Redis double covering the command subset the cache
uses, with expiry driven by a controllable clock.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from nostrcache.cache import CacheKeys, RedisCacheAdapter
from nostrcache.core.model import NostrEvent
from nostrcache.observability.metrics import CacheMetrics

AUTHOR_A = "a" * 64
AUTHOR_B = "b" * 64
SIG = "c" * 128

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: needs a live Redis server (Docker or NOSTRCACHE_TEST_REDIS_URL)"
    )


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self) -> None:
        self.now = 1_000_000.0

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


class FakePipeline:
    """Buffers commands and replays them against FakeRedis on execute()."""

    def __init__(self, redis: FakeRedis, transaction: bool) -> None:
        self.redis = redis
        self.transaction = transaction
        self._queue: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *args: Any) -> None:
        self._queue.clear()

    def __getattr__(self, name: str) -> Callable[..., FakePipeline]:
        if name.startswith("_") or not hasattr(FakeRedis, name):
            raise AttributeError(name)

        def queue(*args: Any, **kwargs: Any) -> FakePipeline:
            self._queue.append((name, args, kwargs))
            return self

        return queue

    async def execute(self, raise_on_error: bool = True) -> list[Any]:
        self.redis.pipelines.append((self.transaction, [name for name, _, _ in self._queue]))
        if self.redis.unreachable:
            raise RedisConnectionError("Error connecting to fake redis")
        results: list[Any] = []
        for name, args, kwargs in self._queue:
            try:
                results.append(await getattr(self.redis, name)(*args, **kwargs))
            except ResponseError as exc:
                if raise_on_error:
                    raise
                results.append(exc)
        self._queue.clear()
        return results


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis with bytes responses."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.unreachable = False
        self.closed = False
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.pipelines: list[tuple[bool, list[str]]] = []
        self._data: dict[str, Any] = {}
        self._expires_at: dict[str, float] = {}

    def _check(self, name: str, *args: Any) -> None:
        if self.unreachable:
            raise RedisConnectionError("Error connecting to fake redis")
        self.calls.append((name, args))

    def _live(self, key: str) -> Any:
        deadline = self._expires_at.get(key)
        if deadline is not None and deadline <= self.clock.now:
            self._data.pop(key, None)
            self._expires_at.pop(key, None)
        return self._data.get(key)

    def _typed(self, key: str, kind: type) -> Any:
        value = self._live(key)
        if value is not None and not isinstance(value, kind):
            raise ResponseError(WRONGTYPE)
        return value

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    async def get(self, key: str) -> bytes | None:
        self._check("get", key)
        return self._typed(key, bytes)

    async def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        self._check("set", key, value)
        self._data[key] = _to_bytes(value)
        self._expires_at.pop(key, None)
        if ex is not None:
            self._expires_at[key] = self.clock.now + ex
        return True

    async def hgetall(self, key: str) -> dict[bytes, bytes]:
        self._check("hgetall", key)
        return dict(self._typed(key, dict) or {})

    async def hset(self, key: str, field: str, value: Any) -> int:
        self._check("hset", key, field, value)
        mapping = self._typed(key, dict)
        if mapping is None:
            mapping = self._data[key] = {}
        name = _to_bytes(field)
        added = int(name not in mapping)
        mapping[name] = _to_bytes(value)
        return added

    async def expire(self, key: str, seconds: int) -> bool:
        self._check("expire", key, seconds)
        if self._live(key) is None:
            return False
        self._expires_at[key] = self.clock.now + seconds
        return True

    async def ttl(self, key: str) -> int:
        self._check("ttl", key)
        if self._live(key) is None:
            return -2
        deadline = self._expires_at.get(key)
        if deadline is None:
            return -1
        return int(deadline - self.clock.now)

    async def sadd(self, key: str, *members: Any) -> int:
        self._check("sadd", key, *members)
        current = self._typed(key, set)
        if current is None:
            current = self._data[key] = set()
        added = 0
        for member in members:
            raw = _to_bytes(member)
            if raw not in current:
                current.add(raw)
                added += 1
        return added

    async def smembers(self, key: str) -> set[bytes]:
        self._check("smembers", key)
        return set(self._typed(key, set) or set())

    async def delete(self, *keys: str) -> int:
        self._check("delete", *keys)
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                removed += 1
            self._data.pop(key, None)
            self._expires_at.pop(key, None)
        return removed

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def keys() -> CacheKeys:
    return CacheKeys()


@pytest.fixture
def metrics() -> CacheMetrics:
    return CacheMetrics()


@pytest.fixture
def adapter(fake_redis: FakeRedis, metrics: CacheMetrics) -> RedisCacheAdapter:
    return RedisCacheAdapter(fake_redis, ttl=3600, metrics=metrics)  # type: ignore[arg-type]


@pytest.fixture
def make_event() -> Callable[..., NostrEvent]:
    """Factory for events whose id matches their contents."""

    def _make(
        pubkey: str = AUTHOR_A,
        kind: int = 1,
        content: str = "hello",
        tags: list[list[str]] | None = None,
        created_at: int = 1_700_000_000,
    ) -> NostrEvent:
        draft = NostrEvent(
            id="0" * 64,
            pubkey=pubkey,
            created_at=created_at,
            kind=kind,
            tags=tags or [],
            content=content,
            sig=SIG,
        )
        return draft.model_copy(update={"id": draft.compute_id()})

    return _make
