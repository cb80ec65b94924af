"""Basic tests to verify test DB setup."""

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import select, text

from shorturl.models.access_log import AccessLog
from shorturl.models.url import ShortURL, ShortURLCreate, to_utc


@pytest.mark.asyncio
async def test_tables_exist(test_engine):
    """Verify both tables exist in the test database."""
    async with test_engine.connect() as conn:
        result = await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
        tables = {row[0] for row in result.fetchall()}

    assert {"short_urls", "access_logs"} <= tables


@pytest.mark.asyncio
async def test_access_log_foreign_key(test_db):
    result = await test_db.execute(text("PRAGMA foreign_key_list('access_logs')"))
    foreign_keys = result.fetchall()

    assert len(foreign_keys) == 1
    # (id, seq, table, from, to, on_update, on_delete, match)
    assert foreign_keys[0][2] == "short_urls"
    assert foreign_keys[0][3] == "short_code"
    assert foreign_keys[0][6] == "CASCADE"


@pytest.mark.asyncio
async def test_short_url_round_trip(test_db):
    url = ShortURL(
        long_url="https://example.com",
        short_code="test123",
        is_custom=True,
    )
    test_db.add(url)
    await test_db.commit()

    result = await test_db.execute(select(ShortURL).where(ShortURL.short_code == "test123"))
    retrieved_url = result.scalars().first()

    assert retrieved_url is not None
    assert retrieved_url.long_url == "https://example.com"
    assert retrieved_url.click_count == 0
    assert to_utc(retrieved_url.created_at) <= datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_access_log_insert(test_db):
    test_db.add(ShortURL(long_url="https://example.com", short_code="logged1"))
    await test_db.commit()

    test_db.add(AccessLog(short_code="logged1", ip_address="127.0.0.1", user_agent="pytest"))
    await test_db.commit()

    result = await test_db.execute(select(AccessLog).where(AccessLog.short_code == "logged1"))
    entry = result.scalars().one()
    assert abs(to_utc(entry.accessed_at) - datetime.now(timezone.utc)) < timedelta(minutes=1)


def test_expiry_helpers():
    now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    url = ShortURL(short_code="exp", long_url="https://example.com", expires_at=now + timedelta(minutes=5))

    assert url.is_expired(now) is False
    assert url.is_expired(now + timedelta(minutes=5)) is True
    assert url.remaining_ttl(now) == timedelta(minutes=5)
    # Naive values, as SQLite returns them, count as UTC
    assert url.remaining_ttl(now.replace(tzinfo=None)) == timedelta(minutes=5)

    forever = ShortURL(short_code="forever", long_url="https://example.com")
    assert forever.is_expired(now) is False
    assert forever.remaining_ttl(now) is None


def test_aware_expiry_is_normalized_to_utc():
    aware = datetime(2030, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    data = ShortURLCreate(short_code="tz", long_url="https://example.com", expires_at=aware)

    assert data.expires_at == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert data.expires_at.utcoffset() == timedelta(0)


def test_generated_expiration_is_aware():
    expires = ShortURL.generate_expiration(days=1)
    assert expires.tzinfo is not None
    assert timedelta(hours=23) < expires - datetime.now(timezone.utc) <= timedelta(days=1)


def test_engine_options_per_environment():
    from sqlalchemy.pool import NullPool

    from shorturl.core.config import EnvironmentType
    from shorturl.db.base import engine_options

    assert engine_options(EnvironmentType.TESTING) == {"echo": False, "poolclass": NullPool}

    production = engine_options(EnvironmentType.PRODUCTION)
    assert production["echo"] is False
    assert production["pool_pre_ping"] is True
    assert "poolclass" not in production


@pytest.mark.asyncio
async def test_health_check_reports_healthy(session_factory):
    from shorturl.db.base import DatabaseHealthCheck

    result = await DatabaseHealthCheck.check_connection(session_factory)
    assert result["status"] == "healthy"
    assert result["error"] is None
