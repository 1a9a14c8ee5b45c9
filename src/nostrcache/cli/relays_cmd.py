"""CLI commands for cached relay lists.

Usage:
    nostrcache relays show <pubkey>
    nostrcache relays save relay-list.json
    nostrcache relays save relay-list.json --subject <pubkey>
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

app = typer.Typer(help="Inspect and populate cached relay lists", no_args_is_help=True)


@app.command("show")
def show(
    pubkey: str = typer.Argument(..., help="Subject pubkey (hex)"),
    redis_url: str | None = RedisUrlOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Print the cached relay tags for a pubkey."""
    setup_logging(log_level)
    asyncio.run(_show(pubkey, redis_url))


async def _show(pubkey: str, redis_url: str | None) -> None:
    from rich.console import Console
    from rich.table import Table

    from nostrcache.errors import CacheUnavailableError

    async with build_adapter(redis_url) as adapter:
        try:
            tags = await adapter.get_relay_list(pubkey)
        except CacheUnavailableError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=2) from e

    if not tags:
        typer.echo(f"No cached relay list for {pubkey}", err=True)
        raise typer.Exit(code=1)

    table = Table(title=f"Relays for {pubkey[:16]}")
    table.add_column("Relay")
    table.add_column("Marker")
    for tag in sorted(tags):
        table.add_row(tag[1] if len(tag) > 1 else "", tag[2] if len(tag) > 2 else "")
    Console().print(table)


@app.command("save")
def save(
    path: Path = typer.Argument(
        ...,
        help="JSON file holding a relay list event",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    subject: str | None = typer.Option(
        None,
        "--subject",
        "-s",
        help="Pubkey to file the relays under (defaults to the event author)",
    ),
    redis_url: str | None = RedisUrlOption,
    log_level: str | None = LogLevelOption,
) -> None:
    """Save the relay tags of a relay list event."""
    setup_logging(log_level)
    asyncio.run(_save(path, subject, redis_url))


async def _save(path: Path, subject: str | None, redis_url: str | None) -> None:
    from pydantic import ValidationError

    from nostrcache.core.model import EventKind, NostrEvent
    from nostrcache.errors import CacheError

    try:
        event = NostrEvent.model_validate(read_json_file(path))
    except ValidationError as e:
        typer.echo(f"Invalid event in {path}: {e}", err=True)
        raise typer.Exit(code=1) from e

    if event.kind != EventKind.RELAY_LIST:
        typer.echo(f"Expected kind {int(EventKind.RELAY_LIST)}, got {event.kind}", err=True)
        raise typer.Exit(code=1)

    async with build_adapter(redis_url) as adapter:
        try:
            added = await adapter.save_relay_list(subject or event.pubkey, event)
        except CacheError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=2) from e

    typer.echo(f"Added {added} new relay tag(s)")
