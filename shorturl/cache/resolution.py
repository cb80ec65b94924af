"""Short code to long URL cache in front of the durable store.

Entries are disposable projections of store records. Whoever writes an entry
passes a TTL no longer than the record's remaining validity, so an entry that
exists always points at a record that was valid when it was written.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import timedelta
from typing import Callable, Optional, Tuple

import redis.asyncio as redis

from shorturl.cache.helpers import handle_redis_errors
from shorturl.cache.keys import CacheKeySchema

logger = logging.getLogger(__name__)


def ttl_to_millis(ttl: Optional[timedelta]) -> Optional[int]:
    """Convert a TTL to whole milliseconds, None meaning no expiration."""
    if ttl is None:
        return None
    return int(ttl.total_seconds() * 1000)


class ResolutionCache(ABC):
    """Interface of the resolution cache."""

    @abstractmethod
    async def get(self, code: str) -> Optional[str]:
        """Return the cached long URL, or None on a miss."""

    @abstractmethod
    async def put(self, code: str, long_url: str, ttl: Optional[timedelta]) -> None:
        """Cache ``long_url`` for ``ttl``; None caches without expiration.

        A TTL that is zero or negative writes nothing.
        """


class RedisResolutionCache(ResolutionCache):
    """Resolution cache stored as plain Redis strings with per-key expiry."""

    def __init__(self, client: redis.Redis, keys: CacheKeySchema):
        self.client = client
        self.keys = keys

    @handle_redis_errors
    async def get(self, code: str) -> Optional[str]:
        return await self.client.get(self.keys.url_key(code))

    @handle_redis_errors
    async def put(self, code: str, long_url: str, ttl: Optional[timedelta]) -> None:
        px = ttl_to_millis(ttl)
        if px is not None and px <= 0:
            logger.debug(f"Skipping cache write for {code}: non-positive TTL")
            return
        await self.client.set(self.keys.url_key(code), long_url, px=px)


class InMemoryResolutionCache(ResolutionCache):
    """Process-local resolution cache honoring the same TTL rules.

    Expired entries are purged every ``sweep_interval`` writes, and the least
    recently used entry is evicted once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 100_000,
        sweep_interval: int = 256,
    ):
        if max_entries <= 0 or sweep_interval <= 0:
            raise ValueError("max_entries and sweep_interval must be positive")
        self._clock = clock
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        self._entries: "OrderedDict[str, Tuple[str, Optional[float]]]" = OrderedDict()
        self._writes = 0

    @property
    def size(self) -> int:
        """Number of entries held, expired ones included until swept."""
        return len(self._entries)

    async def get(self, code: str) -> Optional[str]:
        entry = self._entries.get(code)
        if entry is None:
            return None

        long_url, deadline = entry
        if deadline is not None and self._clock() >= deadline:
            self._entries.pop(code, None)
            return None
        self._entries.move_to_end(code)
        return long_url

    async def put(self, code: str, long_url: str, ttl: Optional[timedelta]) -> None:
        if ttl is None:
            deadline = None
        else:
            seconds = ttl.total_seconds()
            if seconds <= 0:
                return
            deadline = self._clock() + seconds

        self._entries[code] = (long_url, deadline)
        self._entries.move_to_end(code)

        self._writes += 1
        if self._writes % self.sweep_interval == 0:
            self.sweep()
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were dropped."""
        now = self._clock()
        expired = [
            code for code, (_, deadline) in self._entries.items()
            if deadline is not None and now >= deadline
        ]
        for code in expired:
            del self._entries[code]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)
