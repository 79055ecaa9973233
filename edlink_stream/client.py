"""Async Edlink Graph API client with lazy cursor pagination."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from functools import partial
from typing import Any, TypeVar, Union

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from edlink_stream.core.config import EdlinkConfig
from edlink_stream.exceptions import ApiError
from edlink_stream.models import EdlinkEvent, EdlinkPerson, PageEnvelope
from edlink_stream.pagination import ByPages, Page, PaginationPolicy, paginate, resolve_policy

log = structlog.get_logger("edlink_stream.client")

ModelT = TypeVar("ModelT", bound=BaseModel)

PolicyArg = Union[PaginationPolicy, Mapping[str, Any], None]


class EdlinkClient:
    """Thin async wrapper around the Edlink Graph API.

    One instance can serve any number of concurrent traversals; each call
    to :meth:`paginate` owns its own state and only shares the underlying
    HTTP connection pool.
    """

    def __init__(
        self,
        config: EdlinkConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._config = config
        self._default_policy = ByPages(config.default_max_pages)
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {config.client_secret.get_secret_value()}",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def config(self) -> EdlinkConfig:
        return self._config

    @property
    def default_policy(self) -> ByPages:
        return self._default_policy

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> EdlinkClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    def paginate(
        self,
        path: str,
        model: type[ModelT],
        policy: PolicyArg = None,
    ) -> AsyncIterator[ModelT]:
        """Lazily yield *model* records from the Graph API resource at *path*.

        *path* is appended to ``{api_base_url}/v2/graph``.  When *policy* is
        omitted the configured default (``ByPages(default_max_pages)``) is
        used.  Nothing is requested until the first item is awaited.
        """
        resolved = self._default_policy if policy is None else resolve_policy(policy)
        start_url = f"{self._config.graph_url}{path}"
        return paginate(partial(self.fetch_page, model=model), start_url, resolved)

    def events_stream(self, policy: PolicyArg = None) -> AsyncIterator[EdlinkEvent]:
        """Stream of events from ``/events``."""
        return self.paginate("/events", EdlinkEvent, policy)

    def people_stream(self, policy: PolicyArg = None) -> AsyncIterator[EdlinkPerson]:
        """Stream of people from ``/people``."""
        return self.paginate("/people", EdlinkPerson, policy)

    async def fetch_page(self, url: str, *, model: type[ModelT]) -> Page[ModelT]:
        """GET one page at *url* and decode it.

        The URL is used verbatim; ``$next`` cursors are already absolute.
        Raises :class:`ApiError` on transport failure, non-2xx status or an
        undecodable body.  No retries.
        """
        log.debug("client.request", url=url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            envelope = PageEnvelope.model_validate(response.json())
            items = [model.model_validate(raw) for raw in envelope.data]
        except httpx.HTTPStatusError as exc:
            log.warning("client.request_failed", url=url, status=exc.response.status_code)
            raise ApiError(
                f"Edlink API returned HTTP {exc.response.status_code}", url=url, cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("client.request_failed", url=url, error=type(exc).__name__)
            raise ApiError(f"Edlink API request failed: {exc}", url=url, cause=exc) from exc
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError
            log.warning("client.decode_failed", url=url, error=type(exc).__name__)
            raise ApiError(f"undecodable Edlink API response: {exc}", url=url, cause=exc) from exc

        return Page(data=items, next_cursor=envelope.next)
