"""Cache layer for Nostr events.

Provides:
- Primary event store with TTL-based expiration
- Author/kind secondary index pointing into the primary store
- Relay list sets keyed by subject pubkey
"""

from nostrcache.cache.adapter import INDEX_FIELD, RedisCacheAdapter
from nostrcache.cache.keys import AuthorKindKey, CacheKey, CacheKeys, EventKey, RelayListKey
from nostrcache.cache.redis import DEFAULT_TTL, create_redis

__all__ = [
    "RedisCacheAdapter",
    "INDEX_FIELD",
    "DEFAULT_TTL",
    "create_redis",
    # Key schema
    "CacheKeys",
    "CacheKey",
    "EventKey",
    "AuthorKindKey",
    "RelayListKey",
]
