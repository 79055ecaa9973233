"""CLI entry point: edlink-stream.

Subcommands:
    edlink-stream list                      # List example scenarios
    edlink-stream run --example 3           # Run a scenario, print its summary
    edlink-stream events --records 50       # Stream events as JSON lines
    edlink-stream people --all --limit 10   # Stream people as JSON lines
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Callable
from typing import Any

import click
import structlog

from edlink_stream.client import EdlinkClient
from edlink_stream.core.config import EdlinkConfig, load_config
from edlink_stream.core.logging import setup_logging
from edlink_stream.examples import EXAMPLES
from edlink_stream.exceptions import ApiError, ConfigurationError
from edlink_stream.pagination import ByPages, ByRecords, FetchAll, PaginationPolicy
from edlink_stream.streams import take

log = structlog.get_logger("edlink_stream.cli")

_EXIT_API_ERROR = 1
_EXIT_CONFIG_ERROR = 2


def _load_config_or_exit() -> EdlinkConfig:
    try:
        return load_config()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(_EXIT_CONFIG_ERROR)


def _run_or_exit(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except ApiError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(_EXIT_API_ERROR)


def _select_policy(
    pages: int | None, records: int | None, fetch_all: bool
) -> PaginationPolicy | None:
    """Map the mutually exclusive CLI flags to a policy (None = default)."""
    chosen = [opt for opt in (pages is not None, records is not None, fetch_all) if opt]
    if len(chosen) > 1:
        raise click.UsageError("--pages, --records and --all are mutually exclusive")
    if pages is not None:
        return ByPages(pages)
    if records is not None:
        return ByRecords(records)
    if fetch_all:
        return FetchAll()
    return None


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """edlink-stream: lazy, paginated access to the Edlink Graph API."""
    setup_logging("DEBUG" if verbose else None)


@main.command("list")
def list_examples() -> None:
    """List the example scenarios."""
    for number, example in EXAMPLES.items():
        click.echo(f"  {number}. {example.title}")


@main.command("run")
@click.option(
    "-e",
    "--example",
    "example_number",
    type=int,
    default=None,
    help="Scenario number (default: $EXAMPLE or 1)",
)
def run(example_number: int | None) -> None:
    """Run an example scenario and print its summary as JSON."""
    config = _load_config_or_exit()
    number = example_number if example_number is not None else config.example_number
    example = EXAMPLES.get(number)
    if example is None:
        raise click.BadParameter(
            f"invalid example number {number}, choose 1-{len(EXAMPLES)}",
            param_hint="--example",
        )

    async def _go() -> dict[str, Any]:
        async with EdlinkClient(config) as client:
            return await example.run(client)

    log.info("cli.run", example=number, title=example.title)
    summary = _run_or_exit(_go())
    click.echo(json.dumps(summary, indent=2, default=str))


def _stream_command(name: str, getter: Callable[[EdlinkClient, Any], Any]) -> click.Command:
    @click.option("--pages", type=click.IntRange(min=0), default=None, help="Max pages")
    @click.option("--records", type=click.IntRange(min=0), default=None, help="Max records")
    @click.option("--all", "fetch_all", is_flag=True, help="Follow every page")
    @click.option("--limit", type=click.IntRange(min=0), default=None, help="Stop after N items")
    def command(pages: int | None, records: int | None, fetch_all: bool, limit: int | None) -> None:
        policy = _select_policy(pages, records, fetch_all)
        config = _load_config_or_exit()

        async def _go() -> int:
            count = 0
            async with EdlinkClient(config) as client:
                stream = getter(client, policy)
                if limit is not None:
                    stream = take(stream, limit)
                async for item in stream:
                    click.echo(item.model_dump_json(exclude_none=True))
                    count += 1
            return count

        count = _run_or_exit(_go())
        log.info("cli.stream_done", resource=name, count=count)

    command.__doc__ = f"Stream {name} as JSON lines."
    return main.command(name)(command)


events = _stream_command("events", lambda client, policy: client.events_stream(policy))
people = _stream_command("people", lambda client, policy: client.people_stream(policy))
