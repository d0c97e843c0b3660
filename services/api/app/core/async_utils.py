from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, TypeVar

T = TypeVar("T")


def run_async(coro: Awaitable[T]) -> T:
    """Drive an adapter coroutine to completion from sync service code.

    Each call gets its own event loop; routes run in FastAPI's threadpool and
    batch saves run in worker threads, neither of which has a loop to reuse.
    """
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        try:
            loop.close()
        finally:
            asyncio.set_event_loop(None)


async def gather_settled(aws: Iterable[Awaitable[T]]) -> list[T | BaseException]:
    """Await everything concurrently; failures come back in place instead of raising."""
    return await asyncio.gather(*aws, return_exceptions=True)
