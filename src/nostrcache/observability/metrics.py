"""Prometheus metrics for the cache.

Provides:
- Hit and miss counters (misses labelled by reason)
- Write counters for events and relay lists
- Operation latency histogram

Usage:
    from nostrcache.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.hits_total.inc()

Tests and embedders that need isolation build their own
CacheMetrics(registry=CollectorRegistry()).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


class MissReason(str, Enum):
    """Why a lookup produced no event."""

    INDEX = "index"  # no author/kind index entry
    DANGLING = "dangling"  # index points at an expired or evicted event
    MALFORMED = "malformed"  # stored payload could not be decoded


class NoOpMetric:
    """No-op metric for when metrics are disabled."""

    def labels(self, **kwargs: Any) -> "NoOpMetric":
        """Return self for chaining."""
        return self

    def inc(self, amount: float = 1) -> None:
        """No-op."""
        pass

    def observe(self, value: float) -> None:
        """No-op."""
        pass


class CacheMetrics:
    """Registry-scoped Prometheus metrics for one cache adapter."""

    def __init__(self, registry: CollectorRegistry | None = None, enabled: bool = True):
        self.enabled = enabled
        self.registry = registry if registry is not None else CollectorRegistry()

        if not enabled:
            noop = NoOpMetric()
            self.hits_total: Any = noop
            self.misses_total: Any = noop
            self.writes_total: Any = noop
            self.operation_duration_seconds: Any = noop
            logger.info("Cache metrics are disabled")
            return

        self.hits_total = Counter(
            "nostrcache_hits_total",
            "Events replayed from the cache",
            registry=self.registry,
        )
        self.misses_total = Counter(
            "nostrcache_misses_total",
            "Author/kind lookups that produced no event",
            ["reason"],
            registry=self.registry,
        )
        self.writes_total = Counter(
            "nostrcache_writes_total",
            "Write operations acknowledged by Redis",
            ["kind"],
            registry=self.registry,
        )
        self.operation_duration_seconds = Histogram(
            "nostrcache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
            registry=self.registry,
        )

    def miss(self, reason: MissReason) -> None:
        self.misses_total.labels(reason=reason.value).inc()

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """Observe the duration of the wrapped block."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.operation_duration_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    def generate_latest(self) -> bytes:
        """Generate metrics in the Prometheus exposition format."""
        if not self.enabled:
            return b"# Metrics disabled\n"
        return generate_latest(self.registry)


# Process-wide metrics on the default Prometheus registry
_default_metrics: CacheMetrics | None = None


def get_metrics() -> CacheMetrics:
    """Get the shared metrics registered on prometheus_client.REGISTRY.

    Collectors can be registered only once per registry, so every adapter
    that reports to the default registry shares this instance.
    """
    global _default_metrics
    if _default_metrics is None:
        _default_metrics = CacheMetrics(registry=REGISTRY)
    return _default_metrics
