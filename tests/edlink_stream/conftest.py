"""Shared fixtures for edlink_stream tests.

HTTP is served in-memory through ``httpx.MockTransport``; no network needed.
"""

from __future__ import annotations

import httpx
import pytest
import structlog
from pydantic import SecretStr

from edlink_stream.client import EdlinkClient
from edlink_stream.core.config import EdlinkConfig

BASE_URL = "https://api.test"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def _quiet_structlog():
    """Keep log lines out of captured stdout (CLI output is parsed)."""
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    yield
    structlog.reset_defaults()


class FakeGraphServer:
    """In-memory Graph API.

    Each resource is a list of pages; page *i* links to page *i+1* via
    ``?cursor=i+1`` and the last page has a null ``$next``.
    """

    def __init__(self) -> None:
        self.resources: dict[str, list[list[dict]]] = {}
        self.failures: dict[tuple[str, int], httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def add(self, resource: str, pages: list[list[dict]]) -> None:
        self.resources[resource] = pages

    def fail(self, resource: str, page: int, response: httpx.Response) -> None:
        self.failures[(resource, page)] = response

    def requests_for(self, resource: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{resource}")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        resource = request.url.path.rsplit("/", 1)[-1]
        pages = self.resources.get(resource)
        if pages is None:
            return httpx.Response(404, json={"$errors": [{"message": "not found"}]})

        index = int(request.url.params.get("cursor", "0"))
        if (resource, index) in self.failures:
            return self.failures[(resource, index)]

        data = pages[index] if index < len(pages) else []
        next_url = None
        if index + 1 < len(pages):
            next_url = f"{BASE_URL}/v2/graph/{resource}?cursor={index + 1}"
        return httpx.Response(200, json={"$data": data, "$next": next_url})


def _events(start: int, count: int) -> list[dict]:
    return [
        {"id": f"evt-{i}", "type": "person.created", "data": {"n": i}}
        for i in range(start, start + count)
    ]


@pytest.fixture
def graph_server():
    server = FakeGraphServer()
    # 8 events over pages of 3, 3, 2
    server.add("events", [_events(1, 3), _events(4, 3), _events(7, 2)])
    server.add(
        "people",
        [
            [
                {"id": "p-1", "first_name": "Ada", "display_name": "Ada L.", "email": "ada@x.io"},
                {"id": "p-2", "first_name": "Alan", "roles": [{"name": "teacher"}]},
            ],
            [{"id": "p-3", "first_name": "Grace", "roles": None}],
        ],
    )
    return server


@pytest.fixture
def make_config():
    def _make(**overrides) -> EdlinkConfig:
        values = {
            "client_id": "client-123",
            "client_secret": SecretStr("s3cret-token"),
            "api_base_url": BASE_URL,
            "default_max_pages": 3,
        }
        values.update(overrides)
        return EdlinkConfig(**values)

    return _make


@pytest.fixture
def make_client(graph_server, make_config):
    def _make(**overrides) -> EdlinkClient:
        return EdlinkClient(
            make_config(**overrides), transport=httpx.MockTransport(graph_server.handler)
        )

    return _make
