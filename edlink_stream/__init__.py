"""edlink-stream: lazy, paginated streams over the Edlink Graph API."""

from edlink_stream.client import EdlinkClient
from edlink_stream.core.config import EdlinkConfig, load_config
from edlink_stream.exceptions import ApiError, ConfigurationError, EdlinkError, PolicyViolation
from edlink_stream.models import EdlinkEvent, EdlinkPerson
from edlink_stream.pagination import (
    ByPages,
    ByRecords,
    FetchAll,
    Page,
    PaginationPolicy,
    TraversalState,
    paginate,
    resolve_policy,
)
from edlink_stream.streams import collect, for_each, merge, take

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ByPages",
    "ByRecords",
    "ConfigurationError",
    "EdlinkClient",
    "EdlinkConfig",
    "EdlinkError",
    "EdlinkEvent",
    "EdlinkPerson",
    "FetchAll",
    "Page",
    "PaginationPolicy",
    "PolicyViolation",
    "TraversalState",
    "collect",
    "for_each",
    "load_config",
    "merge",
    "paginate",
    "resolve_policy",
    "take",
]
