"""Combinators over lazy record streams (async iterators)."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import Any, TypeVar

T = TypeVar("T")

_DONE = object()


async def _close(stream: AsyncIterator[Any]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


async def take(stream: AsyncIterator[T], n: int) -> AsyncIterator[T]:
    """Yield at most *n* items from *stream*, then close it.

    Closing the source stops the traversal, so no page beyond the one
    holding the *n*-th item is ever requested.
    """
    if n <= 0:
        await _close(stream)
        return
    count = 0
    try:
        async for item in stream:
            yield item
            count += 1
            if count >= n:
                break
    finally:
        await _close(stream)


async def collect(stream: AsyncIterator[T], limit: int | None = None) -> list[T]:
    """Drain *stream* into a list, optionally stopping after *limit* items."""
    source = stream if limit is None else take(stream, limit)
    async with aclosing(source) as items:
        return [item async for item in items]


async def for_each(
    stream: AsyncIterator[T], handler: Callable[[T], Awaitable[Any] | Any]
) -> int:
    """Call *handler* on each item in order, one at a time.

    *handler* may be a plain function or a coroutine function.  Returns the
    number of items processed.  An exception from the stream or the handler
    propagates after the stream is closed.
    """
    count = 0
    async with aclosing(stream) as items:
        async for item in items:
            result = handler(item)
            if inspect.isawaitable(result):
                await result
            count += 1
    return count


class _Failed:
    __slots__ = ("exc",)

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


async def merge(*streams: AsyncIterator[Any], buffer: int = 1) -> AsyncIterator[Any]:
    """Interleave *streams* concurrently, first available item wins.

    Each source keeps its own order; the interleaving between sources is
    unspecified.  The sources share one queue of *buffer* x len(streams)
    slots, so a fast source may fill all of them, plus one more item held
    by its pending put.  *buffer* must be at least 1.  The first source
    error is re-raised and the other sources are cancelled.  Closing the
    merged stream cancels every source.
    """
    if buffer < 1:
        raise ValueError(f"buffer must be >= 1, got {buffer}")
    if not streams:
        return

    queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=buffer * len(streams))

    async def pump(source: AsyncIterator[Any]) -> None:
        try:
            async with aclosing(source) as items:
                async for item in items:
                    await queue.put(item)
        except Exception as exc:
            await queue.put(_Failed(exc))
            return
        await queue.put(_DONE)

    tasks = [asyncio.create_task(pump(source)) for source in streams]
    remaining = len(tasks)
    try:
        while remaining:
            item = await queue.get()
            if item is _DONE:
                remaining -= 1
                continue
            if isinstance(item, _Failed):
                raise item.exc
            yield item
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
