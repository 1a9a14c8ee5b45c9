"""Redis cache adapter for Nostr subscriptions.

Two structures live in Redis:

- Primary store: ``{prefix}:event:<id>`` -> canonical event JSON, with TTL.
- Author/kind index: ``{prefix}:ak:<author>:<kind>`` hash whose ``event``
  field holds the id of the last event recorded for that pair. Its TTL is
  refreshed on every write.

Relay lists are kept separately as sets of JSON-encoded ``r`` tags under
``{prefix}:relays:<pubkey>``.

The index is a pointer into the primary store and may outlive its target
(the primary entry can be evicted on its own). Readers treat such dangling
pointers, like any absent or undecodable entry, as a miss.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from nostrcache.cache.keys import CacheKeys
from nostrcache.cache.redis import DEFAULT_TTL, create_redis
from nostrcache.core.canonicalize import canonical_bytes, loads
from nostrcache.core.model import RELAY_TAG, NostrEvent, SubscriptionFilter, Tag
from nostrcache.errors import CacheUnavailableError, CacheWriteError, MalformedPayloadError
from nostrcache.observability.metrics import CacheMetrics, MissReason, get_metrics

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry
    from redis.asyncio import Redis

    from nostrcache.config import Settings
    from nostrcache.sink import EventSink

logger = logging.getLogger(__name__)

# Hash field of the author/kind index that holds the event id
INDEX_FIELD = "event"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class RedisCacheAdapter:
    """Event cache backed by a Redis client.

    The adapter keeps no state beyond the client, the key schema and the
    expiry windows, so a single instance can serve concurrent subscriptions.
    """

    # Subscriptions should wait for the cache before querying relays
    locking = True

    def __init__(
        self,
        client: Redis,
        ttl: int = DEFAULT_TTL,
        *,
        keys: CacheKeys | None = None,
        relay_list_ttl: int | None = None,
        metrics: CacheMetrics | None = None,
        owns_client: bool = False,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if relay_list_ttl is not None and relay_list_ttl <= 0:
            raise ValueError("relay_list_ttl must be positive")
        self.client = client
        self.ttl = ttl
        self.keys = keys or CacheKeys()
        self.relay_list_ttl = relay_list_ttl
        self.metrics = metrics or CacheMetrics(enabled=False)
        self._owns_client = owns_client

    @classmethod
    def from_settings(
        cls, settings: Settings, registry: CollectorRegistry | None = None
    ) -> RedisCacheAdapter:
        """Build an adapter that owns a fresh client configured from settings.

        Metrics go to ``registry`` when given, otherwise to the default
        Prometheus registry so a scrape endpoint in the host process sees them.
        """
        if not settings.enable_metrics:
            metrics = CacheMetrics(enabled=False)
        elif registry is None:
            metrics = get_metrics()
        else:
            metrics = CacheMetrics(registry=registry)
        return cls(
            create_redis(settings.redis_url),
            ttl=settings.cache_ttl,
            keys=CacheKeys(settings.key_prefix),
            relay_list_ttl=settings.relay_list_ttl,
            metrics=metrics,
            owns_client=True,
        )

    async def close(self) -> None:
        """Release the client if this adapter created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> RedisCacheAdapter:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @contextmanager
    def _store_call(self, operation: str) -> Iterator[None]:
        """Translate connectivity failures into CacheUnavailableError."""
        try:
            with self.metrics.timed(operation):
                yield
        except (RedisConnectionError, RedisTimeoutError) as exc:
            logger.error("Redis unreachable during %s: %s", operation, exc)
            raise CacheUnavailableError(operation, exc) from exc

    @contextmanager
    def _write_call(self, operation: str) -> Iterator[None]:
        """Like _store_call, and also surface commands Redis rejects."""
        with self._store_call(operation):
            try:
                yield
            except ResponseError as exc:
                logger.error("Redis rejected %s: %s", operation, exc)
                raise CacheWriteError(operation, exc) from exc

    # -------------------------------------------------------------------------
    # Query path
    # -------------------------------------------------------------------------

    async def resolve(self, filter: SubscriptionFilter, sink: EventSink) -> int:
        """Replay cached events matching the filter's authors and kinds.

        Only fully specified author x kind filters are served; anything else
        is a miss by construction and touches Redis not at all. Each hit is
        handed to ``sink`` flagged as coming from the cache.

        Returns:
            Number of events emitted to the sink.
        """
        pairs = filter.author_kind_pairs()
        if not pairs:
            logger.debug("Filter is not an author/kind query, skipping cache")
            return 0

        index_keys = [self.keys.author_kind(author, kind) for author, kind in pairs]

        with self._store_call("resolve"):
            async with self.client.pipeline(transaction=False) as pipe:
                for key in index_keys:
                    pipe.hgetall(key)
                entries = await pipe.execute(raise_on_error=False)

            event_ids: list[str] = []
            for key, entry in zip(index_keys, entries):
                event_id = self._index_target(key, entry)
                if event_id is not None:
                    event_ids.append(event_id)

            if not event_ids:
                return 0

            async with self.client.pipeline(transaction=False) as pipe:
                for event_id in event_ids:
                    pipe.get(self.keys.event(event_id))
                payloads = await pipe.execute(raise_on_error=False)

        emitted = 0
        for event_id, payload in zip(event_ids, payloads):
            event = self._decode_event(event_id, payload)
            if event is None:
                continue
            logger.debug("Cache hit %s", event.id)
            self.metrics.hits_total.inc()
            sink.event_received(event, None, True)
            emitted += 1

        return emitted

    def _index_target(self, key: str, entry: Any) -> str | None:
        """Extract the event id from an index hash, or None on a miss."""
        if isinstance(entry, Exception):
            logger.warning("Unreadable index entry %s: %s", key, entry)
            self.metrics.miss(MissReason.MALFORMED)
            return None
        if not entry:
            self.metrics.miss(MissReason.INDEX)
            return None

        fields = {_text(name): value for name, value in entry.items()}
        event_id = _text(fields.get(INDEX_FIELD))
        if not event_id:
            logger.warning("Index entry %s has no %r field", key, INDEX_FIELD)
            self.metrics.miss(MissReason.MALFORMED)
            return None
        return event_id

    def _decode_event(self, event_id: str, payload: Any) -> NostrEvent | None:
        """Deserialize a primary entry, or None when it is gone or corrupt."""
        if payload is None:
            logger.debug("Dangling index pointer to %s", event_id)
            self.metrics.miss(MissReason.DANGLING)
            return None
        if isinstance(payload, Exception):
            logger.warning("Unreadable event entry %s: %s", event_id, payload)
            self.metrics.miss(MissReason.MALFORMED)
            return None

        try:
            event = NostrEvent.from_json_bytes(payload)
        except (MalformedPayloadError, ValidationError) as exc:
            logger.warning("Discarding malformed cached event %s: %s", event_id, exc)
            self.metrics.miss(MissReason.MALFORMED)
            return None

        if event.id != event_id:
            logger.warning("Cached event under %s carries id %s", event_id, event.id)
            self.metrics.miss(MissReason.MALFORMED)
            return None
        return event

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    async def record(
        self, event: NostrEvent, filter: SubscriptionFilter | None = None
    ) -> None:
        """Store an event and point its author/kind index entry at it.

        The index key is derived from the event alone; ``filter`` is accepted
        so callers can pass the subscription context, but the index keeps a
        single slot per (author, kind) regardless of the query that found the
        event. The last recorded event for a pair wins.
        """
        payload = event.to_json_bytes()
        event_key = self.keys.event(event.id)
        index_key = self.keys.author_kind(event.pubkey, event.kind)

        logger.debug("Recording event %s under %s", event.id, index_key)

        with self._write_call("record"):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.set(event_key, payload, ex=self.ttl)
                pipe.hset(index_key, INDEX_FIELD, event.id)
                pipe.expire(index_key, self.ttl)
                await pipe.execute()

        self.metrics.writes_total.labels(kind="event").inc()

    # -------------------------------------------------------------------------
    # Relay lists
    # -------------------------------------------------------------------------

    async def save_relay_list(self, subject: str, event: NostrEvent) -> int:
        """Add the event's ``r`` tags to the subject's relay list set.

        Writes are additive. Byte-identical tags collapse into one member;
        tags that differ in any way, even insignificantly, are kept apart.

        Returns:
            Number of members that were not already in the set.
        """
        members = [canonical_bytes(tag) for tag in event.get_matching_tags(RELAY_TAG)]
        if not members:
            logger.debug("Relay list event %s carries no relay tags", event.id)
            return 0

        key = self.keys.relay_list(subject)
        with self._write_call("save_relay_list"):
            async with self.client.pipeline(transaction=False) as pipe:
                for member in members:
                    pipe.sadd(key, member)
                if self.relay_list_ttl is not None:
                    pipe.expire(key, self.relay_list_ttl)
                results = await pipe.execute()

        self.metrics.writes_total.labels(kind="relay_list").inc()
        return sum(int(added) for added in results[: len(members)])

    async def get_relay_list(self, subject: str) -> list[Tag]:
        """Return the cached relay tags for a subject, in no particular order."""
        key = self.keys.relay_list(subject)
        with self._store_call("get_relay_list"):
            try:
                members = await self.client.smembers(key)
            except ResponseError as exc:
                logger.warning("Unreadable relay list %s: %s", key, exc)
                self.metrics.miss(MissReason.MALFORMED)
                return []

        tags: list[Tag] = []
        for member in members:
            try:
                tag = loads(member)
            except MalformedPayloadError as exc:
                logger.warning("Skipping malformed relay list member in %s: %s", key, exc)
                continue
            if not isinstance(tag, list) or not all(isinstance(part, str) for part in tag):
                logger.warning("Skipping non-tag relay list member in %s", key)
                continue
            tags.append(tag)
        return tags

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self.client.ping()
            return True
        except RedisError:
            return False
