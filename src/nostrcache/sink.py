"""Receivers for events replayed out of the cache.

A subscription engine passes a sink to ``RedisCacheAdapter.resolve``. Every
hit is delivered with ``from_cache=True`` so the receiver can tell replays
apart from live relay traffic when deduplicating or scoring relays.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from nostrcache.core.model import NostrEvent


@runtime_checkable
class EventSink(Protocol):
    """Anything that accepts events for a subscription."""

    def event_received(
        self, event: NostrEvent, relay: str | None = None, from_cache: bool = False
    ) -> None: ...


class CollectingSink:
    """Sink that keeps each distinct event once, in arrival order."""

    def __init__(self) -> None:
        self._events: dict[str, NostrEvent] = {}
        self._cached_ids: set[str] = set()

    def event_received(
        self, event: NostrEvent, relay: str | None = None, from_cache: bool = False
    ) -> None:
        if event.id in self._events:
            return
        self._events[event.id] = event
        if from_cache:
            self._cached_ids.add(event.id)

    @property
    def events(self) -> list[NostrEvent]:
        return list(self._events.values())

    @property
    def ids(self) -> list[str]:
        return list(self._events)

    def was_cached(self, event_id: str) -> bool:
        """Whether the event first arrived as a cache replay."""
        return event_id in self._cached_ids

    def __len__(self) -> int:
        return len(self._events)
