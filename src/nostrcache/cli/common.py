"""Shared plumbing for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import typer

from nostrcache.cache import RedisCacheAdapter
from nostrcache.config import Settings, settings
from nostrcache.observability.logging import configure_logging


def build_adapter(redis_url: str | None = None, ttl: int | None = None) -> RedisCacheAdapter:
    """Create an adapter from settings, with command-line overrides applied."""
    overrides: dict[str, Any] = {}
    if redis_url is not None:
        overrides["redis_url"] = redis_url
    if ttl is not None:
        overrides["cache_ttl"] = ttl
    configured = Settings(**overrides) if overrides else settings
    return RedisCacheAdapter.from_settings(configured)


def setup_logging(level: str | None) -> None:
    configure_logging(
        json_format=settings.log_json,
        level=level or settings.log_level,
    )


def read_json_file(path: Path) -> Any:
    """Load a JSON document, exiting with code 1 if it cannot be parsed."""
    try:
        return orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        typer.echo(f"Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(code=1) from e


RedisUrlOption = typer.Option(
    None,
    "--redis-url",
    help="Redis URL (defaults to NOSTRCACHE_REDIS_URL / REDIS_URL)",
)
LogLevelOption = typer.Option(None, "--log-level", help="Log level override")
