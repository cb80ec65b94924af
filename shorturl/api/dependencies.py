"""API dependencies for FastAPI.

This module wires the cache tier, repositories and services together once at
startup and exposes them to endpoints through dependency functions.
"""

from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
from fastapi import Request
from loguru import logger

from shorturl.cache.bloom import BloomParameters, CollisionFilter, InMemoryBloomFilter, RedisBloomFilter
from shorturl.cache.keys import CacheKeySchema
from shorturl.cache.locks import LocalLockProvider, LockProvider, RedisLockProvider
from shorturl.cache.resolution import InMemoryResolutionCache, RedisResolutionCache, ResolutionCache
from shorturl.core.config import Settings, settings as default_settings
from shorturl.core.hashing import Hasher
from shorturl.db.session import SessionManager
from shorturl.repositories.access_log_repository import AccessLogRepository
from shorturl.repositories.url_repository import URLRepository
from shorturl.services.access_log import AccessLogService
from shorturl.services.codes import CodeGenerator
from shorturl.services.counter import ClickCounter
from shorturl.services.shortener import ResolutionService


@dataclass
class Services:
    """Application-wide service instances."""
    resolution: ResolutionService
    access_log: AccessLogService


def build_services(
    redis_client: Optional[redis.Redis] = None,
    sessions: Optional[SessionManager] = None,
    settings: Optional[Settings] = None,
) -> Services:
    """
    Build the service graph.

    With a Redis client the cache, filter and locks are shared through Redis;
    without one they fall back to process-local implementations.
    """
    settings = settings or default_settings
    sessions = sessions or SessionManager()
    keys = CacheKeySchema(settings.REDIS_KEY_PREFIX)
    params = BloomParameters.for_capacity(settings.BLOOM_CAPACITY, settings.BLOOM_ERROR_RATE)

    collision_filter: CollisionFilter
    cache: ResolutionCache
    locks: LockProvider
    if redis_client is not None:
        collision_filter = RedisBloomFilter(redis_client, keys.bloom_key(), params)
        cache = RedisResolutionCache(redis_client, keys)
        locks = RedisLockProvider(
            redis_client,
            wait_timeout=settings.LOCK_WAIT_TIMEOUT,
            lease_timeout=settings.LOCK_LEASE_TIMEOUT,
        )
        logger.info("Cache tier: redis")
    else:
        collision_filter = InMemoryBloomFilter(params)
        cache = InMemoryResolutionCache()
        locks = LocalLockProvider(wait_timeout=settings.LOCK_WAIT_TIMEOUT)
        logger.info("Cache tier: in-process")

    logger.debug(f"Collision filter sized at {params.size} bits with {params.hash_count} hashes")

    url_repository = URLRepository()
    code_generator = CodeGenerator(
        hasher=Hasher(settings.CODE_HASH_ALGORITHM),
        collision_filter=collision_filter,
        length=settings.URL_CODE_LENGTH,
        alphabet=settings.URL_CODE_CHARS,
        max_attempts=settings.CODE_GENERATION_MAX_ATTEMPTS,
    )
    click_counter = ClickCounter(
        url_repository=url_repository,
        sessions=sessions,
        locks=locks,
        keys=keys,
    )
    resolution = ResolutionService(
        url_repository=url_repository,
        code_generator=code_generator,
        collision_filter=collision_filter,
        cache=cache,
        click_counter=click_counter,
        sessions=sessions,
        cache_timeout=settings.CACHE_TIMEOUT,
    )
    access_log = AccessLogService(
        access_log_repository=AccessLogRepository(),
        sessions=sessions,
    )
    return Services(resolution=resolution, access_log=access_log)


def get_services(request: Request) -> Services:
    """Get the services built at startup."""
    return request.app.state.services


def get_resolution_service(request: Request) -> ResolutionService:
    """Get the URL resolution service."""
    return get_services(request).resolution


def get_access_log_service(request: Request) -> AccessLogService:
    """Get the access log service."""
    return get_services(request).access_log


def get_base_url():
    """Get the base URL for shortened links."""
    return default_settings.BASE_URL.rstrip("/")
