"""
Expiring Cache

In-memory cache where every entry carries its own scheduled eviction.
Uses cachetools.LRUCache as the bounded backing map.

Features:
- One ``loop.call_later`` timer per entry (no background sweep)
- Refreshing a key cancels the previous timer
- An eviction callback only removes the entry it was scheduled for
- Concurrent misses for the same key are coalesced behind a per-key lock
- LRU eviction when max size reached (timers of evicted entries are cancelled)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from cachetools import LRUCache

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Entry:
    value: Any
    timer: asyncio.TimerHandle | None = None


@dataclass(eq=False)
class _KeyLock:
    lock: asyncio.Lock
    users: int = 0  # callers holding or waiting on the lock


class _TimedLRU(LRUCache):
    """LRUCache that cancels the timer of entries it evicts for space."""

    def popitem(self):
        key, entry = super().popitem()
        if entry.timer is not None:
            entry.timer.cancel()
        return key, entry


class ExpiringCache:
    """
    Async-friendly cache with per-entry scheduled expiry.

    All mutation happens on the event loop thread; each entry's expiry is a
    timer handle owned by the entry itself.

    Example:
        cache = ExpiringCache(ttl=86400, max_size=10_000)

        info = await cache.get_or_fetch("110001", lambda: client.lookup("110001"))
    """

    def __init__(
        self,
        ttl: float = 24 * 60 * 60,
        max_size: int = 10_000,
    ):
        """
        Initialize cache.

        Args:
            ttl: Time-to-live in seconds
            max_size: Maximum number of entries
        """
        self._ttl = ttl
        self._entries: _TimedLRU = _TimedLRU(maxsize=max_size)
        self._key_locks: dict[str, _KeyLock] = {}
        self._stats = CacheStats()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def stats(self) -> "CacheStats":
        """Get cache statistics."""
        return self._stats

    def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns:
            Cached value or None if absent/expired
        """
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` and (re)schedule its expiry.

        Must be called from a running event loop.
        """
        previous = self._entries.get(key)
        if previous is not None and previous.timer is not None:
            previous.timer.cancel()

        entry = _Entry(value)
        loop = asyncio.get_running_loop()
        entry.timer = loop.call_later(self._ttl, self._expire, key, entry)
        self._entries[key] = entry

    def _expire(self, key: str, entry: _Entry) -> None:
        # A refresh may have replaced the entry since this timer was scheduled.
        if self._entries.get(key) is entry:
            del self._entries[key]
            self._stats.expirations += 1
            logger.debug(f"Cache entry expired: {key}")

    async def get_or_fetch(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Get from cache or fetch and cache the result.

        Concurrent callers for the same key share one fetch. Exceptions from
        ``fetch_func`` propagate and nothing is cached; ``None`` results are
        not cached either.
        """
        value = self.get(key)
        if value is not None:
            logger.debug(f"Cache hit: {key}")
            return value

        key_lock = self._key_locks.get(key)
        if key_lock is None:
            key_lock = self._key_locks[key] = _KeyLock(asyncio.Lock())
        key_lock.users += 1
        try:
            async with key_lock.lock:
                # Double-check after acquiring lock
                entry = self._entries.get(key)
                if entry is not None:
                    return entry.value

                value = await fetch_func()
                if value is not None:
                    self.set(key, value)
                return value
        finally:
            key_lock.users -= 1
            if key_lock.users == 0:
                del self._key_locks[key]

    def invalidate(self, key: str) -> bool:
        """
        Invalidate cache entry.

        Returns:
            True if entry was removed
        """
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        return True

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        count = len(self._entries)
        for entry in self._entries.values():
            if entry.timer is not None:
                entry.timer.cancel()
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0
