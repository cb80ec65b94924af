"""Session management for database operations.

This module provides utilities for handling SQLAlchemy async sessions
with proper lifecycle management, error handling, and transaction support.
It includes dependency injection patterns optimized for FastAPI.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shorturl.db.base import async_session_factory

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    This is the primary dependency to inject a database session into route handlers.
    It properly manages the session lifecycle, handling cleanup even in case of exceptions.

    Yields:
        AsyncSession: A SQLAlchemy async session object.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except SQLAlchemyError:
            logger.exception("Database error occurred")
            await session.rollback()
            raise


class SessionManager:
    """Session manager for running short units of work in their own transaction.

    The services hold one of these instead of a request-scoped session, so that
    background work (click counting, access logs) never shares a transaction
    with the request that triggered it.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory or async_session_factory

    @asynccontextmanager
    async def transaction_context(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for a database session with transaction support.

        Commits on successful completion. Rolls back on any error, including
        task cancellation, so no write is left half applied.

        Yields:
            AsyncSession: SQLAlchemy async session

        Example:
            ```python
            async with sessions.transaction_context() as db:
                url = await repository.get_by_short_code(db, "abc1234")
            ```
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException as e:
                await session.rollback()
                logger.debug(f"Transaction rolled back: {e!r}")
                raise

