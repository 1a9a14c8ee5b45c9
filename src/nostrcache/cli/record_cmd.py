"""CLI command for recording events into the cache.

Usage:
    nostrcache record events.json
    nostrcache record event.json --ttl 600 --verify-ids
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from nostrcache.cli.common import (
    LogLevelOption,
    RedisUrlOption,
    build_adapter,
    read_json_file,
    setup_logging,
)


def record(
    path: Path = typer.Argument(
        ...,
        help="JSON file holding one event object or an array of events",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    ttl: int | None = typer.Option(
        None,
        "--ttl",
        min=1,
        help="Expiry window in seconds (defaults to NOSTRCACHE_CACHE_TTL)",
    ),
    verify_ids: bool = typer.Option(
        False,
        "--verify-ids",
        help="Reject events whose id does not match their contents",
    ),
    redis_url: str | None = RedisUrlOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Record events from a file into the cache."""
    setup_logging(log_level)
    asyncio.run(_record(path, ttl, verify_ids, redis_url))


async def _record(
    path: Path,
    ttl: int | None,
    verify_ids: bool,
    redis_url: str | None,
) -> None:
    """Async implementation of record command."""
    from pydantic import ValidationError

    from nostrcache.core.model import NostrEvent
    from nostrcache.errors import CacheError

    raw = read_json_file(path)
    items = raw if isinstance(raw, list) else [raw]

    try:
        events = [NostrEvent.model_validate(item) for item in items]
    except ValidationError as e:
        typer.echo(f"Invalid event in {path}: {e}", err=True)
        raise typer.Exit(code=1) from e

    if verify_ids:
        bad = [event.id for event in events if not event.has_valid_id()]
        if bad:
            typer.echo(f"Event id mismatch: {', '.join(bad)}", err=True)
            raise typer.Exit(code=1)

    async with build_adapter(redis_url, ttl) as adapter:
        try:
            await asyncio.gather(*(adapter.record(event) for event in events))
        except CacheError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=2) from e

    typer.echo(f"Recorded {len(events)} event(s)")
