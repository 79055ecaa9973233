"""Lazy cursor pagination over an abstract page fetch."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TypeVar

import structlog

from edlink_stream.exceptions import ApiError
from edlink_stream.pagination.policy import PaginationPolicy
from edlink_stream.pagination.state import Page, TraversalState, advance, should_fetch

log = structlog.get_logger("edlink_stream.pagination")

T = TypeVar("T")

FetchPage = Callable[[str], Awaitable[Page[T]]]


async def paginate(
    fetch_page: FetchPage[T],
    start_url: str,
    policy: PaginationPolicy,
) -> AsyncIterator[T]:
    """Yield items from a cursor-paginated endpoint, one page at a time.

    *fetch_page* is awaited once per page boundary, and only when the
    consumer asks for an item past the current page.  The traversal ends
    when *policy* says stop, the server returns no cursor, or a page comes
    back empty.  A failing fetch raises :class:`ApiError` carrying the URL;
    items already yielded stay delivered.

    The generator is single-use.  Iterating again means calling
    ``paginate`` again, which starts over from *start_url*.
    """
    state = TraversalState(next_url=start_url)

    while should_fetch(state, policy):
        url = state.next_url
        try:
            page = await fetch_page(url)
        except ApiError:
            raise
        except Exception as exc:
            raise ApiError(f"page fetch failed: {exc}", url=url, cause=exc) from exc

        step = advance(state, page, policy)
        if step is None:
            log.debug("pagination.empty_page", url=url, pages=state.page_count)
            return

        items, state = step
        log.debug(
            "pagination.page_fetched",
            url=url,
            policy=policy.kind,
            emitted=len(items),
            pages=state.page_count,
            records=state.record_count,
            has_next=bool(state.next_url),
        )
        for item in items:
            yield item

    log.debug(
        "pagination.stopped",
        policy=policy.kind,
        pages=state.page_count,
        records=state.record_count,
    )
