"""CLI commands for the Nostr event cache.

Provides command-line interface using Typer:
- nostrcache ping: Check Redis connectivity
- nostrcache query: Replay cached events for authors and kinds
- nostrcache record: Record events from a JSON file
- nostrcache relays: Show or save cached relay lists

Usage:
    nostrcache --help
    nostrcache query --author <pubkey> --kind 1
    nostrcache relays show <pubkey>
"""

import asyncio

import typer

from nostrcache.cli.common import RedisUrlOption, build_adapter
from nostrcache.cli.query_cmd import app as query_app
from nostrcache.cli.record_cmd import record
from nostrcache.cli.relays_cmd import app as relays_app

app = typer.Typer(
    name="nostrcache",
    help="Redis-backed event cache for Nostr clients",
    no_args_is_help=True,
)

app.add_typer(query_app, name="query")
app.add_typer(relays_app, name="relays")
app.command("record")(record)


@app.callback()
def callback() -> None:
    """Redis-backed event cache for Nostr clients."""
    pass


@app.command()
def ping(redis_url: str | None = RedisUrlOption) -> None:
    """Check that Redis is reachable."""

    async def _ping() -> bool:
        async with build_adapter(redis_url) as adapter:
            return await adapter.health_check()

    if not asyncio.run(_ping()):
        typer.echo("Redis unreachable", err=True)
        raise typer.Exit(code=1)
    typer.echo("PONG")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
