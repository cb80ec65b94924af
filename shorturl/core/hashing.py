"""Content hashing for short code generation.

The digest of a URL must be identical on every run and every instance, so
only named hashlib algorithms are accepted and nothing process-local (seeds,
randomised ``hash()``) takes part in it.
"""

import hashlib

# Minimum digest size accepted for code generation, in bits
MIN_DIGEST_BITS = 256


class HashingError(Exception):
    """The configured hash cannot digest the input (configuration error)."""
    pass


class Hasher:
    """Deterministic cryptographic digest of a string."""

    def __init__(self, algorithm: str = "sha256"):
        try:
            probe = hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise HashingError(f"Unsupported hash algorithm '{algorithm}'") from e

        if probe.digest_size * 8 < MIN_DIGEST_BITS:
            raise HashingError(
                f"Hash algorithm '{algorithm}' yields {probe.digest_size * 8}-bit digests, "
                f"at least {MIN_DIGEST_BITS} bits are required"
            )
        self.algorithm = algorithm

    def digest(self, value: str) -> bytes:
        """Return the raw digest of ``value`` encoded as UTF-8."""
        try:
            data = value.encode("utf-8")
        except (UnicodeEncodeError, AttributeError) as e:
            raise HashingError(f"Cannot hash value of type {type(value).__name__}: {e}") from e
        return hashlib.new(self.algorithm, data).digest()
