"""Probabilistic set of issued short codes.

The filter answers "definitely never issued" or "maybe issued". It only ever
grows: codes are added, never removed, and no operation resets it, so a code
that was added is reported present for the lifetime of the backing state.
"""

import hashlib
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import redis.asyncio as redis

from shorturl.cache.helpers import handle_redis_errors


@dataclass(frozen=True)
class BloomParameters:
    """Bit array size and hash count of a Bloom filter."""

    size: int
    hash_count: int

    @classmethod
    def for_capacity(cls, capacity: int, error_rate: float) -> "BloomParameters":
        """Size a filter for ``capacity`` items at the given false-positive rate.

        Uses the standard optimum ``m = -n ln p / (ln 2)^2`` and
        ``k = (m / n) ln 2``.
        """
        if capacity <= 0:
            raise ValueError("Bloom filter capacity must be positive")
        if not 0 < error_rate < 1:
            raise ValueError("Bloom filter error rate must be between 0 and 1")

        size = math.ceil(-capacity * math.log(error_rate) / (math.log(2) ** 2))
        hash_count = max(1, round(size / capacity * math.log(2)))
        return cls(size=size, hash_count=hash_count)

    def positions(self, code: str) -> List[int]:
        """Bit offsets for ``code`` using double hashing over one SHA-256 digest."""
        digest = hashlib.sha256(code.encode("utf-8")).digest()
        h1 = int.from_bytes(digest[:8], "big")
        h2 = int.from_bytes(digest[8:16], "big") | 1
        return [(h1 + i * h2) % self.size for i in range(self.hash_count)]


class CollisionFilter(ABC):
    """Interface of the issued-codes filter."""

    @abstractmethod
    async def might_contain(self, code: str) -> bool:
        """False means the code was never added; True means it may have been."""

    @abstractmethod
    async def add(self, code: str) -> None:
        """Record ``code``. Adding the same code twice is harmless."""


class RedisBloomFilter(CollisionFilter):
    """Bloom filter kept in a Redis bitmap, shared by every service instance.

    SETBIT and GETBIT are atomic per bit, so concurrent adds from several
    instances never lose a bit. Pipelines are sent without MULTI since a
    partially applied add only makes later answers more conservative.
    """

    def __init__(self, client: redis.Redis, key: str, params: BloomParameters):
        self.client = client
        self.key = key
        self.params = params

    @handle_redis_errors
    async def might_contain(self, code: str) -> bool:
        pipe = self.client.pipeline(transaction=False)
        for offset in self.params.positions(code):
            pipe.getbit(self.key, offset)
        bits = await pipe.execute()
        return all(int(bit) == 1 for bit in bits)

    @handle_redis_errors
    async def add(self, code: str) -> None:
        pipe = self.client.pipeline(transaction=False)
        for offset in self.params.positions(code):
            pipe.setbit(self.key, offset, 1)
        await pipe.execute()


class InMemoryBloomFilter(CollisionFilter):
    """Process-local Bloom filter for tests and single-instance deployments."""

    def __init__(self, params: BloomParameters):
        self.params = params
        self._bits = bytearray((params.size + 7) // 8)

    async def might_contain(self, code: str) -> bool:
        return all(
            self._bits[offset >> 3] & (1 << (offset & 7))
            for offset in self.params.positions(code)
        )

    async def add(self, code: str) -> None:
        for offset in self.params.positions(code):
            self._bits[offset >> 3] |= 1 << (offset & 7)
