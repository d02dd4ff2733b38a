"""
Async Utilities for Source Calls.

Provides:
- Rate limiting with token bucket
- Deadline guard for a single awaitable
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .exceptions import SourceTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Rate Limiter (Token Bucket Algorithm)
# =============================================================================

@dataclass
class RateLimiter:
    """
    Token bucket rate limiter for outbound calls.

    Example:
        limiter = RateLimiter(rate=5, per=1.0)
        async with limiter:
            await client.get(url)
    """
    rate: float = 5.0  # requests per period
    per: float = 1.0   # period in seconds
    _tokens: float = field(init=False)
    _last_update: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self._tokens = self.rate
        self._last_update = time.monotonic()

    async def acquire(self) -> None:
        """Acquire a token, waiting if necessary."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_update
            self._tokens = min(self.rate, self._tokens + elapsed * (self.rate / self.per))
            self._last_update = now

            if self._tokens < 1:
                wait_time = (1 - self._tokens) * (self.per / self.rate)
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._tokens = 0
            else:
                self._tokens -= 1

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


# =============================================================================
# Deadline Guard
# =============================================================================

async def run_with_deadline(
    coro: Awaitable[T],
    timeout: float,
    *,
    source: str,
) -> T:
    """
    Await ``coro`` for at most ``timeout`` seconds.

    On expiry the wrapped coroutine is cancelled cooperatively by
    ``asyncio.wait_for``. Work that never yields to the event loop, or that
    shields itself from cancellation, keeps running and its result is
    discarded.

    Raises:
        SourceTimeoutError: when the deadline elapses first
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        raise SourceTimeoutError(source, timeout) from e
