"""
Time-bounded in-memory cache.

Each entry carries its own expiry instant; expired entries are dropped
lazily whenever the cache is touched, so no timers are scheduled.
"""

import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

from loguru import logger

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cached value plus the monotonic instant it stops being valid."""

    value: V
    expires_at: float


class ExpiringCache(Generic[V]):
    """Async get-or-compute map with a fixed TTL per entry."""

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[V]] = {}

    def _sweep(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired cache entries")

    def get(self, key: Hashable) -> Optional[V]:
        """Return the live value for ``key`` or None."""
        self._sweep()
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)

    async def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Awaitable[V]],
    ) -> V:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        Concurrent misses on the same key each run ``compute``; the last one
        to finish wins. Exceptions from ``compute`` propagate and nothing is
        stored.
        """
        self._sweep()
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"Cache hit: {key}")
            return entry.value

        value = await compute()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._sweep()
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        self._sweep()
        return key in self._entries
