import functools
from typing import Callable, Optional

__all__ = ["CacheKeySchema"]


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f"{self.prefix}:{key}" if self.prefix else key

    return wrapper


class CacheKeySchema:
    """Provide standardized Redis keys for the shared cache tier.

    Every instance of the service must build identical keys, so the prefix
    comes from configuration (``REDIS_KEY_PREFIX``) and nowhere else.
    """

    def __init__(self, prefix: Optional[str] = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f"Prefix must be of type string (given type: {type(prefix)}).")

        self.prefix = prefix

    @prefix_key
    def url_key(self, short_code: str) -> str:
        return f"url:{short_code}"

    @prefix_key
    def bloom_key(self) -> str:
        return "codes:bloom"

    @prefix_key
    def count_lock_key(self, short_code: str) -> str:
        return f"lock:count:{short_code}"
