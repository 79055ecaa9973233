"""Tests for stream combinators."""

from __future__ import annotations

import asyncio

import pytest

from edlink_stream.exceptions import ApiError
from edlink_stream.pagination import FetchAll, Page, paginate
from edlink_stream.streams import collect, for_each, merge, take


class CountingSource:
    """Async generator wrapper that records how far it was pulled and closed."""

    def __init__(self, items) -> None:
        self.items = list(items)
        self.pulled = 0
        self.closed = False

    async def stream(self):
        try:
            for item in self.items:
                self.pulled += 1
                yield item
                await asyncio.sleep(0)
        finally:
            self.closed = True


class TestTake:
    @pytest.mark.anyio
    async def test_take_closes_source(self):
        source = CountingSource(range(10))
        assert await collect(take(source.stream(), 3)) == [0, 1, 2]
        assert source.pulled == 3
        assert source.closed

    @pytest.mark.anyio
    async def test_take_zero(self):
        source = CountingSource(range(10))
        assert await collect(take(source.stream(), 0)) == []
        assert source.pulled == 0

    @pytest.mark.anyio
    async def test_take_more_than_available(self):
        source = CountingSource(range(2))
        assert await collect(take(source.stream(), 5)) == [0, 1]

    @pytest.mark.anyio
    async def test_take_over_paginator_stops_fetching(self):
        calls = []

        async def fetch(url):
            calls.append(url)
            n = len(calls)
            return Page([f"{n}-a", f"{n}-b", f"{n}-c"], f"page-{n + 1}")

        items = await collect(take(paginate(fetch, "page-1", FetchAll()), 5))
        assert items == ["1-a", "1-b", "1-c", "2-a", "2-b"]
        assert calls == ["page-1", "page-2"]


class TestCollect:
    @pytest.mark.anyio
    async def test_collect_all(self):
        source = CountingSource("abc")
        assert await collect(source.stream()) == ["a", "b", "c"]
        assert source.closed

    @pytest.mark.anyio
    async def test_collect_limit(self):
        source = CountingSource("abcdef")
        assert await collect(source.stream(), limit=2) == ["a", "b"]
        assert source.closed


class TestForEach:
    @pytest.mark.anyio
    async def test_sync_handler(self):
        seen = []
        count = await for_each(CountingSource([1, 2, 3]).stream(), seen.append)
        assert count == 3
        assert seen == [1, 2, 3]

    @pytest.mark.anyio
    async def test_async_handler_runs_sequentially(self):
        seen = []
        active = 0

        async def handler(item):
            nonlocal active
            active += 1
            assert active == 1
            await asyncio.sleep(0)
            seen.append(item)
            active -= 1

        assert await for_each(CountingSource("xyz").stream(), handler) == 3
        assert seen == ["x", "y", "z"]

    @pytest.mark.anyio
    async def test_handler_error_closes_stream(self):
        source = CountingSource(range(5))

        def handler(item):
            if item == 1:
                raise ValueError("bad item")

        with pytest.raises(ValueError):
            await for_each(source.stream(), handler)
        assert source.closed
        assert source.pulled == 2

    @pytest.mark.anyio
    async def test_capture_and_continue(self):
        """A handler that records failures instead of raising sees every item."""
        errors = []

        def handler(item):
            try:
                if item % 2:
                    raise ValueError(item)
            except ValueError as exc:
                errors.append(exc)

        assert await for_each(CountingSource(range(4)).stream(), handler) == 4
        assert len(errors) == 2


class TestMerge:
    @pytest.mark.anyio
    async def test_preserves_per_source_order(self):
        left = CountingSource(["l1", "l2", "l3"])
        right = CountingSource(["r1", "r2"])
        items = await collect(merge(left.stream(), right.stream()))
        assert sorted(items) == ["l1", "l2", "l3", "r1", "r2"]
        assert [i for i in items if i.startswith("l")] == ["l1", "l2", "l3"]
        assert [i for i in items if i.startswith("r")] == ["r1", "r2"]
        assert left.closed and right.closed

    @pytest.mark.anyio
    async def test_no_sources(self):
        assert await collect(merge()) == []

    @pytest.mark.anyio
    async def test_source_error_propagates_and_cancels_others(self):
        endless = CountingSource(range(10_000))

        async def failing():
            yield "ok"
            raise ApiError("boom", url="https://api.test/x")

        with pytest.raises(ApiError, match="boom"):
            await collect(merge(failing(), endless.stream()))
        assert endless.closed
        assert endless.pulled < 10_000

    @pytest.mark.anyio
    async def test_early_close_cancels_sources(self):
        a = CountingSource(range(1000))
        b = CountingSource(range(1000))
        items = await collect(take(merge(a.stream(), b.stream()), 4))
        assert len(items) == 4
        assert a.closed and b.closed
        assert a.pulled < 1000 and b.pulled < 1000

    @pytest.mark.anyio
    async def test_paginated_source_fetches_on_demand(self):
        calls = []

        async def fetch(url):
            calls.append(url)
            n = len(calls)
            return Page([f"{n}-a", f"{n}-b", f"{n}-c"], f"page-{n + 1}")

        merged = merge(paginate(fetch, "page-1", FetchAll()))
        try:
            assert await merged.__anext__() == "1-a"
            for _ in range(20):
                await asyncio.sleep(0)
            assert len(calls) <= 2
        finally:
            await merged.aclose()

    @pytest.mark.anyio
    @pytest.mark.parametrize("buffer", [0, -1])
    async def test_rejects_unbounded_buffer(self, buffer):
        source = CountingSource(range(3))
        with pytest.raises(ValueError, match="buffer"):
            await collect(merge(source.stream(), buffer=buffer))
        assert source.pulled == 0
