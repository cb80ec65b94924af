"""Test fixtures for the URL shortener application."""

import os
import tempfile

# Settings are read once at import time, so the environment must be in place
# before anything from shorturl is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="shorturl-tests-")
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'app.db')}"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["LOG_JSON"] = "false"
os.environ["BASE_URL"] = "http://sho.rt"

from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import shorturl.models  # noqa: F401  registers table models
from shorturl.api.dependencies import build_services
from shorturl.cache.bloom import BloomParameters, InMemoryBloomFilter
from shorturl.cache.keys import CacheKeySchema
from shorturl.cache.locks import LocalLockProvider
from shorturl.cache.resolution import InMemoryResolutionCache
from shorturl.core.config import settings
from shorturl.core.hashing import Hasher
from shorturl.db.session import SessionManager
from shorturl.main import app as main_app
from shorturl.repositories.url_repository import URLRepository
from shorturl.services.codes import CodeGenerator
from shorturl.services.counter import ClickCounter
from shorturl.services.shortener import ResolutionService


@pytest.fixture
def test_engine(tmp_path) -> AsyncEngine:
    """Async engine on a fresh SQLite file with the schema already created."""
    db_file = tmp_path / "test.db"

    # Schema is created through the synchronous driver so the fixture works
    # for both async tests and TestClient-based tests.
    sync_engine = create_engine(f"sqlite:///{db_file}")
    SQLModel.metadata.create_all(sync_engine)
    sync_engine.dispose()

    return create_async_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def sessions(session_factory) -> SessionManager:
    """Transaction factory bound to the test database."""
    return SessionManager(session_factory)


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create isolated test database session."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def keys() -> CacheKeySchema:
    return CacheKeySchema("test")


@pytest.fixture
def collision_filter() -> InMemoryBloomFilter:
    return InMemoryBloomFilter(BloomParameters.for_capacity(10_000, 0.01))


@pytest.fixture
def cache() -> InMemoryResolutionCache:
    return InMemoryResolutionCache()


@pytest.fixture
def locks() -> LocalLockProvider:
    return LocalLockProvider(wait_timeout=10.0)


@pytest.fixture
def url_repository() -> URLRepository:
    """Return URL repository instance."""
    return URLRepository()


@pytest.fixture
def code_generator(collision_filter) -> CodeGenerator:
    return CodeGenerator(
        hasher=Hasher("sha256"),
        collision_filter=collision_filter,
        length=7,
        alphabet=settings.URL_CODE_CHARS,
        max_attempts=5,
    )


@pytest.fixture
def click_counter(url_repository, sessions, locks, keys) -> ClickCounter:
    return ClickCounter(
        url_repository=url_repository,
        sessions=sessions,
        locks=locks,
        keys=keys,
    )


@pytest.fixture
def resolution_service(
    url_repository, code_generator, collision_filter, cache, click_counter, sessions
) -> ResolutionService:
    return ResolutionService(
        url_repository=url_repository,
        code_generator=code_generator,
        collision_filter=collision_filter,
        cache=cache,
        click_counter=click_counter,
        sessions=sessions,
        cache_timeout=3600,
    )


@pytest.fixture
def client(sessions) -> Generator[TestClient, None, None]:
    """Return FastAPI TestClient instance wired to the test database."""
    with TestClient(main_app) as test_client:
        main_app.state.services = build_services(sessions=sessions)
        yield test_client
