"""Async engine, session factory and schema bootstrap for the durable store."""

import asyncio
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from shorturl.core.config import EnvironmentType, settings

logger = logging.getLogger(__name__)


def engine_options(environment: Optional[EnvironmentType] = None) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` in the given environment.

    Tests open a fresh connection per session so that no pooled connection
    outlives the event loop it was created on.
    """
    environment = environment or settings.ENVIRONMENT
    if environment is EnvironmentType.TESTING:
        return {"echo": False, "poolclass": NullPool}

    return {
        "echo": settings.DB_ECHO and environment is EnvironmentType.DEVELOPMENT,
        "pool_size": settings.POSTGRES_POOL_SIZE,
        "max_overflow": settings.POSTGRES_POOL_MAX_OVERFLOW,
        "pool_timeout": settings.POSTGRES_POOL_TIMEOUT,
        "pool_recycle": settings.POSTGRES_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine(url: Optional[str] = None, environment: Optional[EnvironmentType] = None) -> AsyncEngine:
    """Create the async engine for ``url``, defaulting to the configured database."""
    engine_url = url or str(settings.SQLALCHEMY_DATABASE_URI)
    # Credentials sit before the '@'
    logger.info(f"Creating database engine for {engine_url.split('@')[-1]}")
    return create_async_engine(engine_url, **engine_options(environment))


engine = get_engine()

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_models(bind: Optional[AsyncEngine] = None) -> None:
    """Create the short URL and access log tables if they are missing."""
    # Table models register themselves on import
    import shorturl.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database schema is up to date")


class DatabaseHealthCheck:
    """Round-trip probe of the durable store for the health endpoint."""

    @staticmethod
    async def check_connection(session_factory: Optional[async_sessionmaker] = None) -> Dict:
        """Run ``SELECT 1`` and report status, latency and the error if any."""
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            async with (session_factory or async_session_factory)() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "latency_ms": 0, "error": str(e)}

        return {
            "status": "healthy",
            "latency_ms": int((loop.time() - started) * 1000),
            "error": None,
        }
