"""Exceptions raised by the shared cache tier.

Neither of these ever reaches a caller of the resolution service; the service
logs them and carries on against the durable store.
"""


class CacheTierError(Exception):
    """Base exception for cache tier failures."""
    pass


class CacheUnavailableError(CacheTierError):
    """The cache or collision filter backend could not be reached."""
    pass


class LockUnavailableError(CacheTierError):
    """A named lock could not be acquired within the wait bound."""

    def __init__(self, name: str, reason: str = "wait timeout elapsed"):
        self.name = name
        self.reason = reason
        super().__init__(f"Lock '{name}' unavailable: {reason}")
