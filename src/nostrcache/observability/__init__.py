"""Logging and metrics for the cache."""

from nostrcache.observability.logging import LogContext, configure_logging
from nostrcache.observability.metrics import (
    CacheMetrics,
    MissReason,
    NoOpMetric,
    get_metrics,
)

__all__ = [
    "CacheMetrics",
    "LogContext",
    "MissReason",
    "NoOpMetric",
    "configure_logging",
    "get_metrics",
]
