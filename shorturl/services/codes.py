"""Short code generation.

A code is the base-62 rendering of the URL's SHA-256 digest, cut to a fixed
length. The collision filter is consulted before a candidate is handed out;
a hit means "maybe taken", so the URL is re-hashed with a salt and tried again.
"""

import logging
import time
from typing import Callable, Optional

from shorturl.cache.bloom import CollisionFilter
from shorturl.cache.exceptions import CacheUnavailableError
from shorturl.core.hashing import Hasher
from shorturl.services.exceptions import ShortCodeGenerationError

logger = logging.getLogger(__name__)


def encode_base62(num: int, alphabet: str) -> str:
    """Encode a non-negative integer with ``alphabet``, most significant digit first."""
    if num < 0:
        raise ValueError("Only non-negative integers can be encoded")

    base = len(alphabet)
    if num == 0:
        return alphabet[0]

    digits = []
    while num:
        num, rem = divmod(num, base)
        digits.append(alphabet[rem])
    return "".join(reversed(digits))


class CodeGenerator:
    """Derives short codes from long URLs and screens them against the filter."""

    def __init__(
        self,
        hasher: Hasher,
        collision_filter: CollisionFilter,
        length: int,
        alphabet: str,
        max_attempts: int,
        salt_factory: Optional[Callable[[], int]] = None,
    ):
        if length <= 0:
            raise ValueError("Code length must be positive")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")

        self.hasher = hasher
        self.collision_filter = collision_filter
        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts
        self.salt_factory = salt_factory or time.monotonic_ns

    def derive(self, value: str) -> str:
        """Deterministic candidate code for ``value``."""
        digest = self.hasher.digest(value)
        encoded = encode_base62(int.from_bytes(digest, "big"), self.alphabet)
        return encoded[:self.length]

    async def generate(self, long_url: str) -> str:
        """
        Produce a code the filter has never seen and record it there.

        The first attempt hashes the URL alone, so it is reproducible. Later
        attempts append a fresh salt. If the filter cannot be reached the
        candidate is accepted and the store insert decides.

        Raises:
            ShortCodeGenerationError: If every attempt was a filter hit
            HashingError: If the URL cannot be hashed
        """
        value = long_url
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.derive(value)

            try:
                seen = await self.collision_filter.might_contain(candidate)
            except CacheUnavailableError as e:
                logger.warning(f"Collision filter unavailable, accepting candidate {candidate}: {e}")
                return candidate

            if not seen:
                try:
                    await self.collision_filter.add(candidate)
                except CacheUnavailableError as e:
                    logger.warning(f"Could not record {candidate} in collision filter: {e}")
                return candidate

            logger.debug(f"Candidate {candidate} hit the collision filter (attempt {attempt})")
            value = f"{long_url}{self.salt_factory()}"

        raise ShortCodeGenerationError(
            f"Failed to generate a short code after {self.max_attempts} attempts"
        )
