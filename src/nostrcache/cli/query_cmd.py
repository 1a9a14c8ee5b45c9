"""CLI command for replaying cached events.

Usage:
    nostrcache query --author <pubkey> --kind 1
    nostrcache query -a <pubkey> -a <pubkey> -k 0 -k 3
"""

from __future__ import annotations

import asyncio

import typer

from nostrcache.cli.common import LogLevelOption, RedisUrlOption, build_adapter, setup_logging

app = typer.Typer(help="Replay cached events for authors and kinds")


@app.callback(invoke_without_command=True)
def query(
    authors: list[str] = typer.Option(
        ...,
        "--author",
        "-a",
        help="Author pubkey (hex), repeatable",
    ),
    kinds: list[int] = typer.Option(
        ...,
        "--kind",
        "-k",
        help="Event kind, repeatable",
    ),
    subscription_id: str = typer.Option(
        "cli",
        "--subscription-id",
        help="Identifier attached to log records",
    ),
    redis_url: str | None = RedisUrlOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Print cached events as JSON lines.

    Every author is combined with every kind; one cached event at most is
    returned per pair.
    """
    setup_logging(log_level)
    asyncio.run(_query(authors, kinds, subscription_id, redis_url))


async def _query(
    authors: list[str],
    kinds: list[int],
    subscription_id: str,
    redis_url: str | None,
) -> None:
    """Async implementation of query command."""
    from nostrcache.core.model import SubscriptionFilter
    from nostrcache.errors import CacheUnavailableError
    from nostrcache.observability.logging import LogContext
    from nostrcache.sink import CollectingSink

    sink = CollectingSink()
    async with build_adapter(redis_url) as adapter:
        with LogContext(subscription_id=subscription_id):
            try:
                await adapter.resolve(SubscriptionFilter(authors=authors, kinds=kinds), sink)
            except CacheUnavailableError as e:
                typer.echo(str(e), err=True)
                raise typer.Exit(code=2) from e

    for event in sink.events:
        typer.echo(event.to_json_bytes().decode())

    typer.echo(f"{len(sink)} cached event(s)", err=True)
