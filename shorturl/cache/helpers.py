import functools
from typing import Any, Awaitable, Callable, TypeVar

from redis.exceptions import RedisError

from shorturl.cache.exceptions import CacheUnavailableError

__all__ = ["handle_redis_errors"]

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_redis_errors(method: F) -> F:
    """Wrap async Redis-backed methods so backend failures surface as CacheUnavailableError.

    Args:
        method (Callable[..., Awaitable[Any]]):
            Coroutine method performing Redis operations which may raise
            redis.exceptions.RedisError or a socket-level OSError.

    Returns:
        Callable[..., Awaitable[Any]]:
            Wrapped method which raises CacheUnavailableError instead.

    Example:
        >>> @handle_redis_errors
        ... async def get(self, code):
        ...     return await self.client.get(self.keys.url_key(code))
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(
                f"{type(self).__name__}.{method.__name__} failed: {e}"
            ) from e

    return wrapper  # type: ignore[return-value]
