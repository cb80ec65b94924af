"""Named mutual-exclusion locks.

``hold(name)`` waits a bounded time for the lock and raises
LockUnavailableError if it cannot get it. A held lock is released when the
block exits, whether it exits normally, by exception or by cancellation.
"""

import asyncio
import logging
import weakref
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from shorturl.cache.exceptions import LockUnavailableError

logger = logging.getLogger(__name__)


class LockProvider(ABC):
    """Interface of a named lock service."""

    @abstractmethod
    def hold(self, name: str) -> AsyncIterator[None]:
        """Async context manager holding the lock ``name`` for its body."""


class RedisLockProvider(LockProvider):
    """Distributed locks built on redis-py's token-based Lock.

    The lease bounds how long a crashed holder can block others; the wait
    bounds how long a caller blocks before giving up.
    """

    def __init__(self, client: redis.Redis, wait_timeout: float, lease_timeout: float):
        self.client = client
        self.wait_timeout = wait_timeout
        self.lease_timeout = lease_timeout

    @asynccontextmanager
    async def hold(self, name: str) -> AsyncIterator[None]:
        lock = self.client.lock(
            name,
            timeout=self.lease_timeout,
            blocking_timeout=self.wait_timeout,
        )
        try:
            acquired = await lock.acquire()
        except (RedisError, OSError) as e:
            raise LockUnavailableError(name, f"backend error: {e}") from e

        if not acquired:
            raise LockUnavailableError(name)

        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # Lease ran out before release; the key is already gone
                logger.warning(f"Lock '{name}' expired before release: {e}")
            except (RedisError, OSError) as e:
                logger.error(f"Failed to release lock '{name}': {e}")


class LocalLockProvider(LockProvider):
    """Per-name asyncio locks for a single process."""

    def __init__(self, wait_timeout: float):
        self.wait_timeout = wait_timeout
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _get_lock(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[name] = lock
        return lock

    @asynccontextmanager
    async def hold(self, name: str) -> AsyncIterator[None]:
        lock = self._get_lock(name)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.wait_timeout)
        except asyncio.TimeoutError as e:
            raise LockUnavailableError(name) from e

        try:
            yield
        finally:
            lock.release()
