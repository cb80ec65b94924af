"""
Redis client management module.

This module provides a Redis client manager with connection pooling
and error handling for async Redis operations. The shared client backs the
resolution cache, the collision filter and the click-count locks.
"""

from typing import Optional

import redis.asyncio as redis
from loguru import logger
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from shorturl.core.config import settings


class RedisClientManager:
    """
    Async Redis client manager with connection pooling.

    Features:
    - Lazy connection pool creation
    - Connection health checking
    - Clean shutdown of client and pool
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        max_connections: Optional[int] = None,
        socket_timeout: Optional[float] = None,
        socket_connect_timeout: Optional[float] = None,
    ):
        self.uri = uri or settings.REDIS_URI
        self.max_connections = max_connections or settings.REDIS_MAX_CONNECTIONS
        self.socket_timeout = socket_timeout or settings.REDIS_SOCKET_TIMEOUT
        self.socket_connect_timeout = socket_connect_timeout or settings.REDIS_SOCKET_CONNECT_TIMEOUT
        self._connection_pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._is_connected = False

    def _initialize(self) -> None:
        """Initialize the Redis connection pool."""
        self._connection_pool = redis.ConnectionPool.from_url(
            self.uri,
            max_connections=self.max_connections,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.socket_connect_timeout,
            decode_responses=True
        )
        logger.debug(f"Redis connection pool created for {self.uri}")

    @property
    def is_enabled(self) -> bool:
        """Whether the shared cache tier is configured for use."""
        return settings.CACHE_ENABLED

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    async def get_client(self) -> redis.Redis:
        """
        Get a Redis client instance from the connection pool.

        Returns:
            redis.Redis: Redis client instance
        """
        if self._client is None:
            if self._connection_pool is None:
                self._initialize()
            self._client = redis.Redis(connection_pool=self._connection_pool)
        return self._client

    async def ping(self) -> bool:
        """
        Test the Redis connection with a ping command.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            client = await self.get_client()
            result = await client.ping()
            self._is_connected = bool(result)
            return self._is_connected
        except (RedisError, OSError) as e:
            logger.error(f"Redis ping failed: {str(e)}")
            self._is_connected = False
            return False

    async def close(self) -> None:
        """Close the Redis client and connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

        if self._connection_pool:
            await self._connection_pool.disconnect()
            self._connection_pool = None

        self._is_connected = False
        logger.debug("Redis connections closed")


redis_manager = RedisClientManager()
