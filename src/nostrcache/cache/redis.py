"""Redis connection factory.

The cache never keeps a process-wide client. Callers build one here (or bring
their own) and hand it to the adapter, which may take ownership of it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as redis

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Default TTL (1 hour)
DEFAULT_TTL = 3600


def create_redis(url: str) -> Redis:
    """Create a pooled async Redis client.

    Responses are left as bytes; the adapter decodes what it needs.
    """
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=False,
    )
