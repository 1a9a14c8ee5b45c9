"""Cache key schema for the Nostr event cache.

Key format: {prefix}:{namespace}:{parts...}

Where:
- prefix: "nostr" by default (namespace for a shared Redis)
- namespace: "event" (primary store), "ak" (author/kind index),
  "relays" (relay list sets)
- parts: event id, author pubkey and kind, or subject pubkey

Each key family has its own namespace, so no event kind can ever address a
relay list set and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class EventKey:
    """Primary entry: event id -> serialized event."""

    event_id: str

    namespace: ClassVar[str] = "event"

    def parts(self) -> tuple[str, ...]:
        return (self.event_id,)


@dataclass(frozen=True, slots=True)
class AuthorKindKey:
    """Secondary index entry: (author, kind) -> latest event id."""

    author: str
    kind: int

    namespace: ClassVar[str] = "ak"

    def parts(self) -> tuple[str, ...]:
        return (self.author, str(int(self.kind)))


@dataclass(frozen=True, slots=True)
class RelayListKey:
    """Relay list set for a subject pubkey."""

    pubkey: str

    namespace: ClassVar[str] = "relays"

    def parts(self) -> tuple[str, ...]:
        return (self.pubkey,)


CacheKey = EventKey | AuthorKindKey | RelayListKey


class CacheKeys:
    """Cache key generator following a consistent naming convention."""

    PREFIX = "nostr"

    def __init__(self, prefix: str = PREFIX):
        if not prefix or ":" in prefix:
            raise ValueError(f"invalid key prefix: {prefix!r}")
        self.prefix = prefix

    def render(self, key: CacheKey) -> str:
        """Render a typed key to its Redis key string."""
        return ":".join((self.prefix, key.namespace, *key.parts()))

    def event(self, event_id: str) -> str:
        """Key for a primary event entry."""
        return self.render(EventKey(event_id))

    def author_kind(self, author: str, kind: int) -> str:
        """Key for the author/kind index hash."""
        return self.render(AuthorKindKey(author, kind))

    def relay_list(self, pubkey: str) -> str:
        """Key for a subject's relay list set."""
        return self.render(RelayListKey(pubkey))

    def parse_key(self, key: str) -> CacheKey | None:
        """Parse a key string back into its typed form.

        Returns None if the key doesn't belong to this schema.
        """
        parts = key.split(":")
        if len(parts) < 3 or parts[0] != self.prefix:
            return None

        namespace, rest = parts[1], parts[2:]
        if namespace == EventKey.namespace and len(rest) == 1 and rest[0]:
            return EventKey(rest[0])
        if namespace == RelayListKey.namespace and len(rest) == 1 and rest[0]:
            return RelayListKey(rest[0])
        if namespace == AuthorKindKey.namespace and len(rest) == 2 and rest[0]:
            try:
                return AuthorKindKey(rest[0], int(rest[1]))
            except ValueError:
                return None
        return None
