"""Shared cache tier: resolution cache, collision filter and named locks."""
from shorturl.cache.bloom import BloomParameters, CollisionFilter, InMemoryBloomFilter, RedisBloomFilter
from shorturl.cache.exceptions import CacheUnavailableError, LockUnavailableError
from shorturl.cache.keys import CacheKeySchema
from shorturl.cache.locks import LocalLockProvider, LockProvider, RedisLockProvider
from shorturl.cache.resolution import InMemoryResolutionCache, RedisResolutionCache, ResolutionCache

__all__ = [
    "BloomParameters",
    "CollisionFilter",
    "InMemoryBloomFilter",
    "RedisBloomFilter",
    "CacheUnavailableError",
    "LockUnavailableError",
    "CacheKeySchema",
    "LockProvider",
    "LocalLockProvider",
    "RedisLockProvider",
    "ResolutionCache",
    "InMemoryResolutionCache",
    "RedisResolutionCache",
]
