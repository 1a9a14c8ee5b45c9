"""Exceptions raised by the cache.

Connectivity failures reach callers from every operation. Writes also
surface commands that Redis rejects. Read-side misses and malformed
payloads are absorbed by the adapter and reported as empty results.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache errors."""


class CacheUnavailableError(CacheError):
    """The backing Redis server could not be reached or timed out."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        message = f"cache unavailable during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class CacheWriteError(CacheError):
    """Redis rejected a write, e.g. a key holding the wrong type."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        message = f"cache write rejected during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class MalformedPayloadError(CacheError):
    """A stored payload could not be decoded."""
