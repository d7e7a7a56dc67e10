"""Concurrency control utilities for async operations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")


@dataclass
class ConcurrencyLimiter:
    """Bound the number of coroutines in flight."""

    max_concurrent: int
    _semaphore: asyncio.Semaphore = field(init=False)

    def __post_init__(self) -> None:
        self._semaphore = asyncio.Semaphore(self.max_concurrent)

    async def __aenter__(self) -> ConcurrencyLimiter:
        await self._semaphore.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._semaphore.release()


async def gather_ordered(
    factories: Sequence[Callable[[], Awaitable[T]]],
    *,
    max_concurrent: int,
) -> list[T]:
    """Run coroutine factories concurrently and return results in input order.

    Args:
        factories: Zero-argument callables each producing one awaitable.
        max_concurrent: Upper bound on awaitables in flight.

    Returns:
        One result per factory, in the order the factories were given.
    """

    limiter = ConcurrencyLimiter(max(1, max_concurrent))

    async def _run(factory: Callable[[], Awaitable[T]]) -> T:
        async with limiter:
            return await factory()

    return list(await asyncio.gather(*(_run(f) for f in factories)))
