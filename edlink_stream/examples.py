"""Usage scenarios for the Edlink streams, selectable from the CLI.

Each scenario takes a live :class:`EdlinkClient` and returns a
JSON-serialisable summary.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

import structlog

from edlink_stream.client import EdlinkClient
from edlink_stream.models import EdlinkEvent, EdlinkPerson
from edlink_stream.pagination import ByRecords, FetchAll
from edlink_stream.streams import collect, for_each, merge, take

log = structlog.get_logger("edlink_stream.examples")

# Scenario 1 caps its run so a slow API can't hang it.
_DEFAULT_PAGES_ITEM_CAP = 500
_DEFAULT_PAGES_TIMEOUT = 12.0


def _event_sample(events: list[EdlinkEvent], n: int = 3) -> list[dict[str, Any]]:
    return [{"id": e.id, "type": e.type} for e in events[:n]]


def _person_sample(people: list[EdlinkPerson], n: int = 3) -> list[dict[str, Any]]:
    return [{"id": p.id, "name": p.name, "email": p.email} for p in people[:n]]


async def fetch_default_pages(client: EdlinkClient) -> dict[str, Any]:
    """Events under the default page limit."""
    max_pages = client.default_policy.max_pages
    log.info("example.start", example=1, max_pages=max_pages)
    events = await asyncio.wait_for(
        collect(client.events_stream(), limit=_DEFAULT_PAGES_ITEM_CAP),
        timeout=_DEFAULT_PAGES_TIMEOUT,
    )
    return {
        "strategy": f"default ({max_pages} pages)",
        "total_count": len(events),
        "first_event": events[0].model_dump(exclude_none=True) if events else None,
        "sample": _event_sample(events),
    }


async def fetch_all_data(client: EdlinkClient) -> dict[str, Any]:
    """Every available event.  Can be slow on large tenants."""
    log.info("example.start", example=2)
    log.warning("example.fetch_all", note="may take time if there are many events")
    events = await collect(client.events_stream(FetchAll()))
    return {
        "strategy": "fetch everything",
        "total_count": len(events),
        "sample": _event_sample(events),
    }


async def fetch_max_records(client: EdlinkClient, max_records: int = 50) -> dict[str, Any]:
    """Events limited by record count instead of page count."""
    log.info("example.start", example=3, max_records=max_records)
    events = await collect(client.events_stream(ByRecords(max_records)))
    return {
        "strategy": f"max {max_records} records",
        "total_count": len(events),
        "sample": _event_sample(events),
    }


async def process_sequentially(client: EdlinkClient) -> dict[str, Any]:
    """Handle events one by one without collecting them."""
    log.info("example.start", example=4)
    ids: list[str] = []
    processed = 0

    def handle(event: EdlinkEvent) -> None:
        nonlocal processed
        processed += 1
        if event.id:
            ids.append(event.id)
        if processed == 1 or processed % 10 == 0:
            log.info("example.processed", n=processed, id=event.id, type=event.type)

    total = await for_each(client.events_stream(), handle)
    return {
        "strategy": "sequential processing",
        "total_count": total,
        "first_ids": ids[:3],
    }


async def take_first_n(client: EdlinkClient, n: int = 5) -> dict[str, Any]:
    """First *n* events of an unbounded stream; later pages are never fetched."""
    log.info("example.start", example=5, n=n)
    events = await collect(take(client.events_stream(FetchAll()), n))
    return {
        "strategy": f"take first {n} of all",
        "total_count": len(events),
        "sample": _event_sample(events, n),
    }


async def fetch_people(client: EdlinkClient) -> dict[str, Any]:
    """People under the default page limit."""
    log.info("example.start", example=6)
    people = await collect(client.people_stream())
    return {
        "strategy": f"default ({client.default_policy.max_pages} pages)",
        "total_count": len(people),
        "sample": _person_sample(people),
    }


async def _tagged(kind: str, stream: Any) -> Any:
    async with aclosing(stream) as items:
        async for item in items:
            yield {"kind": kind, "id": item.id, "data": item}


async def merge_streams(client: EdlinkClient) -> dict[str, Any]:
    """Events and people fetched concurrently into one stream."""
    log.info("example.start", example=7)
    items = await collect(
        merge(
            _tagged("event", client.events_stream()),
            _tagged("person", client.people_stream()),
        )
    )
    events = [i for i in items if i["kind"] == "event"]
    people = [i for i in items if i["kind"] == "person"]
    sample = []
    for item in items[:5]:
        data = item["data"]
        label = data.type if item["kind"] == "event" else data.display_name
        sample.append({"kind": item["kind"], "id": item["id"], "label": label})
    return {
        "strategy": "merged events + people",
        "total_count": len(items),
        "event_count": len(events),
        "person_count": len(people),
        "sample": sample,
    }


async def compare_strategies(client: EdlinkClient, max_records: int = 100) -> dict[str, Any]:
    """Run default, fetch-all and record-limited traversals side by side."""
    log.info("example.start", example=8)
    default_events = await collect(client.events_stream())
    all_events = await collect(client.events_stream(FetchAll()))
    limited_events = await collect(client.events_stream(ByRecords(max_records)))

    if len(all_events) > 200:
        recommendation = 'use pagination in production (avoid "fetch all" on large datasets)'
    else:
        recommendation = 'safe to use "fetch all" on small datasets'
    return {
        "strategy": "comparison",
        "default_count": len(default_events),
        "fetch_all_count": len(all_events),
        f"max_{max_records}_records_count": len(limited_events),
        "all_vs_default": len(all_events) - len(default_events),
        "recommendation": recommendation,
    }


@dataclass(frozen=True)
class Example:
    title: str
    run: Callable[[EdlinkClient], Awaitable[dict[str, Any]]]


EXAMPLES: dict[int, Example] = {
    1: Example("Fetch events with the default page limit", fetch_default_pages),
    2: Example("Fetch all available events", fetch_all_data),
    3: Example("Fetch events with a max record limit", fetch_max_records),
    4: Example("Process events sequentially", process_sequentially),
    5: Example("Take the first N events", take_first_n),
    6: Example("Fetch people", fetch_people),
    7: Example("Merge event and people streams", merge_streams),
    8: Example("Compare pagination strategies", compare_strategies),
}
