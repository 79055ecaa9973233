"""Traversal state and the pure per-page transition."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from edlink_stream.pagination.policy import PaginationPolicy

T = TypeVar("T")


@dataclass(frozen=True)
class TraversalState:
    """Carried between page fetches and replaced wholesale at each step.

    An empty ``next_url`` means no further request may be made.
    """

    next_url: str
    page_count: int = 0
    record_count: int = 0


@dataclass(frozen=True)
class Page(Generic[T]):
    """One fetched page: its items and the server cursor (``None`` = end)."""

    data: Sequence[T] = field(default_factory=tuple)
    next_cursor: str | None = None


def should_fetch(state: TraversalState, policy: PaginationPolicy) -> bool:
    """Return True if another page may be requested from *state*."""
    if not state.next_url:
        return False
    return policy.should_continue(state)


def advance(
    state: TraversalState, page: Page[T], policy: PaginationPolicy
) -> tuple[Sequence[T], TraversalState] | None:
    """Apply one fetched *page* to *state*.

    Returns ``(items_to_emit, next_state)``, or ``None`` when the page is
    empty.  An empty page ends the traversal even if it carries a cursor.
    """
    if not page.data:
        return None

    items = policy.trim(page.data, state)
    record_count = state.record_count + len(items)
    next_state = TraversalState(
        next_url=policy.next_url(page.next_cursor, record_count),
        page_count=state.page_count + 1,
        record_count=record_count,
    )
    return items, next_state
