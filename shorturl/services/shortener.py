"""URL shortening service for the URL shortener application.

This module contains the ResolutionService class which implements business logic
for creating short URLs and resolving short codes back to long URLs.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError

from shorturl.cache.bloom import CollisionFilter
from shorturl.cache.exceptions import CacheUnavailableError, LockUnavailableError
from shorturl.cache.resolution import ResolutionCache
from shorturl.db.session import SessionManager
from shorturl.models.url import ShortURL, ShortURLCreate, to_utc, utc_now
from shorturl.repositories.base import DuplicateEntityError, RepositoryError
from shorturl.repositories.url_repository import URLRepository
from shorturl.services.codes import CodeGenerator
from shorturl.services.counter import ClickCounter
from shorturl.services.exceptions import (
    InvalidExpirationError,
    ShortCodeAlreadyExistsError,
    URLCreationError,
    URLExpiredError,
    URLNotFoundError,
)

logger = logging.getLogger(__name__)


class ResolutionService:
    """
    Service for URL shortening business logic.

    Creation goes code generator -> durable store -> cache. Resolution goes
    cache -> durable store -> cache refill. Every successful resolution
    schedules a click increment that runs after the caller has its answer.
    Cache, filter and lock failures are logged and never reach the caller.
    """

    def __init__(
        self,
        url_repository: URLRepository,
        code_generator: CodeGenerator,
        collision_filter: CollisionFilter,
        cache: ResolutionCache,
        click_counter: ClickCounter,
        sessions: SessionManager,
        cache_timeout: int,
    ):
        """
        Initialize the resolution service.

        Args:
            url_repository: Repository for URL data access
            code_generator: Generator for hash-derived short codes
            collision_filter: Filter of issued codes, shared with the generator
            cache: Resolution cache in front of the store
            click_counter: Serialized click counter
            sessions: Transaction factory for the durable store
            cache_timeout: Upper bound on a cache entry's lifetime in seconds, 0 for none
        """
        self.url_repository = url_repository
        self.code_generator = code_generator
        self.collision_filter = collision_filter
        self.cache = cache
        self.click_counter = click_counter
        self.sessions = sessions
        self.cache_timeout = cache_timeout
        self._pending: Set[asyncio.Task] = set()

    async def create_short_url(
        self,
        long_url: str,
        custom_code: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> ShortURL:
        """
        Create a shortened URL with optional custom code and expiration.

        Args:
            long_url: The URL to shorten
            custom_code: Optional caller-chosen code
            expires_at: Optional expiry; must be in the future

        Returns:
            ShortURL: The created shortened URL

        Raises:
            InvalidExpirationError: If expires_at is not in the future
            ShortCodeAlreadyExistsError: If the code is already taken in the store
            ShortCodeGenerationError: If no candidate code cleared the filter
            URLCreationError: If the store insert fails for other reasons
        """
        long_url = str(long_url)
        expires_at = to_utc(expires_at) if expires_at else ShortURL.generate_expiration()
        if expires_at is not None and expires_at <= utc_now():
            raise InvalidExpirationError(f"Expiration {expires_at.isoformat()} is not in the future")

        if custom_code:
            short_code = custom_code
            await self._precheck_custom_code(short_code)
        else:
            short_code = await self.code_generator.generate(long_url)

        url_data = ShortURLCreate(
            short_code=short_code,
            long_url=long_url,
            expires_at=expires_at,
            is_custom=bool(custom_code),
        )

        try:
            async with self.sessions.transaction_context() as db:
                url = await self.url_repository.create_short_url(db, url_data)
        except DuplicateEntityError as e:
            logger.info(f"Short code '{short_code}' already exists: {e}")
            raise ShortCodeAlreadyExistsError(f"Short code '{short_code}' is already in use") from e
        except RepositoryError as e:
            logger.error(f"Error creating short URL: {e}")
            raise URLCreationError(f"Failed to create short URL: {str(e)}") from e

        if custom_code:
            try:
                await self.collision_filter.add(short_code)
            except CacheUnavailableError as e:
                logger.warning(f"Could not record custom code {short_code} in collision filter: {e}")

        await self._cache_put(url)
        logger.info(f"Created short URL {short_code} -> {long_url}")
        return url

    async def resolve(self, short_code: str) -> str:
        """
        Resolve a short code to its long URL.

        Args:
            short_code: The short code to look up

        Returns:
            str: The long URL

        Raises:
            URLNotFoundError: If no URL with this code exists
            URLExpiredError: If the URL exists but has expired
            RepositoryError: If the durable store cannot be read
        """
        long_url = await self._cache_get(short_code)
        if long_url is not None:
            self._schedule_click(short_code)
            return long_url

        async with self.sessions.transaction_context() as db:
            url = await self.url_repository.get_by_short_code(db, short_code)

        if url is None:
            raise URLNotFoundError(f"URL with code '{short_code}' not found")
        if url.is_expired():
            raise URLExpiredError(f"URL with code '{short_code}' has expired")

        await self._cache_put(url)
        self._schedule_click(short_code)
        return url.long_url

    async def list_urls(
        self,
        page_num: int = 1,
        page_size: int = 10,
        short_code: Optional[str] = None,
        long_url: Optional[str] = None,
    ) -> Tuple[List[ShortURL], int]:
        """
        Get one page of short URLs, newest first.

        Args:
            page_num: 1-based page number
            page_size: Number of records per page
            short_code: Optional substring filter on the short code
            long_url: Optional substring filter on the long URL

        Returns:
            Tuple of (records on the page, total matching records)
        """
        skip = (max(page_num, 1) - 1) * page_size
        async with self.sessions.transaction_context() as db:
            return await self.url_repository.list_urls(
                db,
                skip=skip,
                limit=page_size,
                short_code_like=short_code,
                long_url_like=long_url,
            )

    async def drain(self) -> None:
        """Wait for every scheduled click increment to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def seed_collision_filter(self, batch_size: int = 1000) -> int:
        """
        Add every stored short code to the collision filter.

        A process-local filter starts empty, so it has to be rebuilt from the
        store before the first code is generated. Returns the number of codes added.
        """
        seeded = 0
        last_code: Optional[str] = None
        while True:
            async with self.sessions.transaction_context() as db:
                codes = await self.url_repository.short_codes_after(db, after=last_code, limit=batch_size)
            for code in codes:
                await self.collision_filter.add(code)
            seeded += len(codes)
            if len(codes) < batch_size:
                break
            last_code = codes[-1]

        logger.info(f"Seeded collision filter with {seeded} stored codes")
        return seeded

    def cache_ttl(self, url: ShortURL, now: Optional[datetime] = None) -> Optional[timedelta]:
        """
        Lifetime for a cache entry of ``url``.

        Never longer than the record's remaining validity, and capped by the
        configured cache timeout. None means no expiration.
        """
        cap = timedelta(seconds=self.cache_timeout) if self.cache_timeout > 0 else None
        remaining = url.remaining_ttl(now)
        if remaining is None:
            return cap
        if cap is None:
            return remaining
        return min(remaining, cap)

    async def _precheck_custom_code(self, short_code: str) -> None:
        # Advisory only; the store insert is what rejects a taken code
        try:
            if await self.collision_filter.might_contain(short_code):
                logger.info(f"Custom code '{short_code}' may already be taken, deferring to the store")
        except CacheUnavailableError as e:
            logger.warning(f"Collision filter unavailable for custom code {short_code}: {e}")

    async def _cache_get(self, short_code: str) -> Optional[str]:
        try:
            return await self.cache.get(short_code)
        except CacheUnavailableError as e:
            logger.warning(f"Cache read failed for {short_code}, falling back to store: {e}")
            return None

    async def _cache_put(self, url: ShortURL) -> None:
        ttl = self.cache_ttl(url)
        if ttl is not None and ttl <= timedelta(0):
            return
        try:
            await self.cache.put(url.short_code, url.long_url, ttl)
        except CacheUnavailableError as e:
            logger.warning(f"Cache write failed for {url.short_code}: {e}")

    def _schedule_click(self, short_code: str) -> None:
        task = asyncio.create_task(self._record_click(short_code))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record_click(self, short_code: str) -> None:
        try:
            await self.click_counter.increment(short_code)
        except LockUnavailableError as e:
            logger.warning(f"Click for {short_code} not counted: {e}")
        except (RepositoryError, SQLAlchemyError) as e:
            logger.error(f"Click for {short_code} not counted: {e}")
