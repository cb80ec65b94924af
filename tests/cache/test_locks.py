"""Tests for the named lock providers."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, LockNotOwnedError

from shorturl.cache.exceptions import LockUnavailableError
from shorturl.cache.locks import LocalLockProvider, RedisLockProvider


@pytest.mark.cache
class TestLocalLockProvider:

    @pytest.mark.asyncio
    async def test_waiter_times_out(self):
        locks = LocalLockProvider(wait_timeout=0.05)

        async with locks.hold("lock:count:a"):
            with pytest.raises(LockUnavailableError) as excinfo:
                async with locks.hold("lock:count:a"):
                    pass

        assert excinfo.value.name == "lock:count:a"

    @pytest.mark.asyncio
    async def test_different_names_do_not_contend(self):
        locks = LocalLockProvider(wait_timeout=0.05)

        async with locks.hold("lock:count:a"):
            async with locks.hold("lock:count:b"):
                pass

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        locks = LocalLockProvider(wait_timeout=0.05)

        with pytest.raises(RuntimeError):
            async with locks.hold("lock:count:a"):
                raise RuntimeError("fail inside")

        async with locks.hold("lock:count:a"):
            pass

    @pytest.mark.asyncio
    async def test_serializes_holders(self):
        locks = LocalLockProvider(wait_timeout=5)
        inside = 0
        peak = 0

        async def worker():
            nonlocal inside, peak
            async with locks.hold("lock:count:a"):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.001)
                inside -= 1

        await asyncio.gather(*(worker() for _ in range(20)))
        assert peak == 1


@pytest.mark.cache
class TestRedisLockProvider:

    @pytest.fixture
    def lock(self):
        lock = MagicMock()
        lock.acquire = AsyncMock(return_value=True)
        lock.release = AsyncMock()
        return lock

    @pytest.fixture
    def client(self, lock):
        client = MagicMock()
        client.lock.return_value = lock
        return client

    @pytest.mark.asyncio
    async def test_acquire_and_release(self, client, lock):
        locks = RedisLockProvider(client, wait_timeout=2.0, lease_timeout=5.0)

        async with locks.hold("test:lock:count:a"):
            lock.release.assert_not_awaited()

        client.lock.assert_called_once_with("test:lock:count:a", timeout=5.0, blocking_timeout=2.0)
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_acquired(self, client, lock):
        lock.acquire.return_value = False
        locks = RedisLockProvider(client, wait_timeout=2.0, lease_timeout=5.0)

        with pytest.raises(LockUnavailableError):
            async with locks.hold("test:lock:count:a"):
                pass
        lock.release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_down(self, client, lock):
        lock.acquire.side_effect = RedisConnectionError("down")
        locks = RedisLockProvider(client, wait_timeout=2.0, lease_timeout=5.0)

        with pytest.raises(LockUnavailableError):
            async with locks.hold("test:lock:count:a"):
                pass

    @pytest.mark.asyncio
    async def test_released_when_body_fails(self, client, lock):
        locks = RedisLockProvider(client, wait_timeout=2.0, lease_timeout=5.0)

        with pytest.raises(ValueError):
            async with locks.hold("test:lock:count:a"):
                raise ValueError("body failed")
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_lease_on_release_is_not_raised(self, client, lock):
        lock.release.side_effect = LockNotOwnedError("gone")
        locks = RedisLockProvider(client, wait_timeout=2.0, lease_timeout=5.0)

        async with locks.hold("test:lock:count:a"):
            pass
