"""Pagination policies: when to stop and how much of a page to emit.

Three variants, one per traversal:

    ByPages(max_pages)      stop once ``page_count >= max_pages``
    ByRecords(max_records)  stop once ``record_count >= max_records``,
                            truncating the final page to the allowance
    FetchAll()              follow the server cursor until it runs out
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, Union

from edlink_stream.exceptions import PolicyViolation
from edlink_stream.pagination.state import TraversalState

T = TypeVar("T")


@dataclass(frozen=True)
class ByPages:
    """Fetch at most *max_pages* pages; pages are never truncated."""

    max_pages: int

    kind = "pages"

    def should_continue(self, state: TraversalState) -> bool:
        return state.page_count < self.max_pages

    def trim(self, items: Sequence[T], state: TraversalState) -> Sequence[T]:
        return items

    def next_url(self, cursor: str | None, record_count: int) -> str:
        return cursor or ""


@dataclass(frozen=True)
class ByRecords:
    """Emit at most *max_records* items, slicing the last page if needed."""

    max_records: int

    kind = "records"

    def should_continue(self, state: TraversalState) -> bool:
        return state.record_count < self.max_records

    def trim(self, items: Sequence[T], state: TraversalState) -> Sequence[T]:
        remaining = self.max_records - state.record_count
        if len(items) <= remaining:
            return items
        return items[: max(remaining, 0)]

    def next_url(self, cursor: str | None, record_count: int) -> str:
        # Limit reached: stop even if the server has more.
        if not cursor or record_count >= self.max_records:
            return ""
        return cursor


@dataclass(frozen=True)
class FetchAll:
    """No count limit.  Terminates only on a null cursor or an empty page."""

    kind = "all"

    def should_continue(self, state: TraversalState) -> bool:
        return True

    def trim(self, items: Sequence[T], state: TraversalState) -> Sequence[T]:
        return items

    def next_url(self, cursor: str | None, record_count: int) -> str:
        return cursor or ""


PaginationPolicy = Union[ByPages, ByRecords, FetchAll]

_POLICY_TYPES = (ByPages, ByRecords, FetchAll)


def _limit(descriptor: Mapping[str, Any], *names: str) -> int:
    for name in names:
        if name in descriptor:
            value = descriptor[name]
            break
    else:
        raise PolicyViolation(f"policy {descriptor!r} is missing {names[0]!r}")

    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise PolicyViolation(f"{names[0]} must be an integer, got {value!r}")
    if value < 0:
        raise PolicyViolation(f"{names[0]} must be >= 0, got {value}")
    return value


def resolve_policy(descriptor: PaginationPolicy | Mapping[str, Any]) -> PaginationPolicy:
    """Resolve *descriptor* to a policy object.

    Accepts a policy instance (returned unchanged) or a mapping tagged by
    ``kind``::

        {"kind": "pages", "max_pages": 3}
        {"kind": "records", "max_records": 50}
        {"kind": "all"}

    The camelCase spellings ``maxPages``/``maxRecords`` are accepted too.
    Raises :class:`PolicyViolation` for anything else.
    """
    if isinstance(descriptor, _POLICY_TYPES):
        return descriptor
    if not isinstance(descriptor, Mapping):
        raise PolicyViolation(f"unknown pagination policy: {descriptor!r}")

    kind = descriptor.get("kind", descriptor.get("type"))
    if kind == ByPages.kind:
        return ByPages(_limit(descriptor, "max_pages", "maxPages"))
    if kind == ByRecords.kind:
        return ByRecords(_limit(descriptor, "max_records", "maxRecords"))
    if kind == FetchAll.kind:
        return FetchAll()
    raise PolicyViolation(f"unknown pagination policy kind: {kind!r}")
