"""Run one concurrent wave of requests with a concurrency limit."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


async def run_wave(
    func: Callable[[ItemT], Awaitable[ResultT]],
    items: Sequence[ItemT],
    max_concurrent: int,
) -> list[ResultT]:
    """Apply ``func`` to every item concurrently and return results in item order.

    At most ``max_concurrent`` calls are in flight. The first failure cancels
    every call that has not finished yet and propagates.
    """
    semaphore = asyncio.Semaphore(max_concurrent)

    async def bounded(item: ItemT) -> ResultT:
        async with semaphore:
            return await func(item)

    tasks = [asyncio.ensure_future(bounded(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
