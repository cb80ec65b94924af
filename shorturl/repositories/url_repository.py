"""URL Repository for the URL shortener application.

This module provides the URLRepository class for database operations related to ShortURL models.
It is the durable store gateway: the insert here is the authoritative
uniqueness check for short codes.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.models.url import ShortURL, ShortURLCreate
from shorturl.repositories.base import BaseRepository, DuplicateEntityError, RepositoryError


class URLRepository(BaseRepository[ShortURL, ShortURLCreate]):
    """
    Repository for ShortURL model database operations.

    This repository provides methods for creating and retrieving shortened
    URLs, the click counter read-modify-write, and paged listing.
    """

    def __init__(self):
        """Initialize the repository with the ShortURL model type."""
        super().__init__(ShortURL)

    async def create_short_url(
        self,
        db: AsyncSession,
        data: Union[ShortURLCreate, Dict[str, Any]]
    ) -> ShortURL:
        """
        Create a new shortened URL entry.

        The primary key constraint rejects an existing short code; no
        check-then-insert is done, so two concurrent inserts of one code
        cannot both succeed.

        Args:
            db: Database session
            data: Short URL data (either as a ShortURLCreate model or dictionary)

        Returns:
            The created ShortURL entity

        Raises:
            DuplicateEntityError: If the short code already exists
            RepositoryError: On other database errors
        """
        try:
            return await self.create(db, data)
        except IntegrityError as e:
            if isinstance(data, ShortURLCreate):
                short_code = data.short_code
            else:
                short_code = data.get("short_code", "unknown")
            raise DuplicateEntityError(self.model_type, "short_code", short_code) from e

    async def get_by_short_code(self, db: AsyncSession, short_code: str) -> Optional[ShortURL]:
        """
        Find a URL by its short code.

        Args:
            db: Database session
            short_code: The unique short code to look up

        Returns:
            The ShortURL if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(self.model_type).where(self.model_type.short_code == short_code)
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving URL by short code: {e}") from e

    async def increment_click_count(self, db: AsyncSession, short_code: str) -> Optional[ShortURL]:
        """
        Increment the click count for a URL.

        This is a plain read-modify-write. It is only correct while the caller
        holds the per-code counter lock.

        Args:
            db: Database session
            short_code: The short code whose counter to bump

        Returns:
            The updated ShortURL if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.short_code == short_code)
                .execution_options(populate_existing=True)
            )
            result = await db.execute(query)
            url = result.scalar_one_or_none()
            if url is None:
                return None

            url.click_count += 1
            await db.flush()
            return url
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error incrementing click count: {e}") from e

    async def list_urls(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 10,
        short_code_like: Optional[str] = None,
        long_url_like: Optional[str] = None,
    ) -> Tuple[List[ShortURL], int]:
        """
        Page through URLs, newest first, optionally filtered by substring.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Page size
            short_code_like: Substring the short code must contain
            long_url_like: Substring the long URL must contain

        Returns:
            Tuple of (page of ShortURL entities, total matching count)

        Raises:
            RepositoryError: On database errors
        """
        conditions = []
        if short_code_like:
            conditions.append(self.model_type.short_code.contains(short_code_like, autoescape=True))
        if long_url_like:
            conditions.append(self.model_type.long_url.contains(long_url_like, autoescape=True))

        total = await self.count(db, conditions=conditions)
        items = await self.get_all(
            db,
            skip=skip,
            limit=limit,
            order_by=desc(self.model_type.created_at),
            conditions=conditions,
        )
        return items, total

    async def short_codes_after(
        self,
        db: AsyncSession,
        after: Optional[str] = None,
        limit: int = 1000,
    ) -> List[str]:
        """
        Page through every stored short code in code order.

        Keyset pagination: pass the last code of the previous page as ``after``.

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(self.model_type.short_code).order_by(self.model_type.short_code).limit(limit)
            if after is not None:
                query = query.where(self.model_type.short_code > after)
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error listing short codes: {e}") from e
