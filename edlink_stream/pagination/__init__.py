"""Cursor pagination engine: lazy page traversal under a stopping policy."""

from edlink_stream.pagination.paginator import FetchPage, paginate
from edlink_stream.pagination.policy import (
    ByPages,
    ByRecords,
    FetchAll,
    PaginationPolicy,
    resolve_policy,
)
from edlink_stream.pagination.state import Page, TraversalState, advance, should_fetch

__all__ = [
    "ByPages",
    "ByRecords",
    "FetchAll",
    "FetchPage",
    "Page",
    "PaginationPolicy",
    "TraversalState",
    "advance",
    "paginate",
    "resolve_policy",
    "should_fetch",
]
