"""Concurrency limiter for outbound provider calls."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")

DEFAULT_MAX_CONCURRENCY = 5


@dataclass
class ConcurrencyLimiter:
    """Bounds how many wrapped coroutines run at once; extra callers queue."""

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    _semaphore: asyncio.Semaphore = field(init=False)

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._semaphore = asyncio.Semaphore(self.max_concurrency)

    async def run(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func`` once a slot is free."""
        async with self._semaphore:
            return await func()
