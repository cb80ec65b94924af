"""Tests for repository error handling."""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import SQLAlchemyError

from shorturl.models.access_log import AccessLogCreate
from shorturl.repositories.access_log_repository import AccessLogRepository
from shorturl.repositories.url_repository import RepositoryError
from tests.utils import create_test_url


@pytest.mark.repository
class TestRepositoryErrorHandling:
    """Tests for error handling in repositories."""

    @pytest.mark.asyncio
    async def test_lookup_error_is_wrapped(self, test_db, url_repository):
        with patch.object(test_db, "execute", side_effect=SQLAlchemyError("Test database error")):
            with pytest.raises(RepositoryError) as excinfo:
                await url_repository.get_by_short_code(test_db, "errortest")

        assert "Test database error" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_increment_error_is_wrapped(self, test_db, url_repository):
        with patch.object(test_db, "execute", side_effect=SQLAlchemyError("boom")):
            with pytest.raises(RepositoryError):
                await url_repository.increment_click_count(test_db, "errortest")

    @pytest.mark.asyncio
    async def test_count_error_is_wrapped(self, test_db, url_repository):
        with patch.object(test_db, "execute", side_effect=SQLAlchemyError("boom")):
            with pytest.raises(RepositoryError):
                await url_repository.list_urls(test_db)


@pytest.mark.repository
class TestAccessLogRepository:

    @pytest.mark.asyncio
    async def test_create_and_read_back(self, sessions):
        repository = AccessLogRepository()
        await create_test_url(sessions, short_code="logged1")

        async with sessions.transaction_context() as db:
            entry = await repository.create_access_log(db, AccessLogCreate(
                short_code="logged1",
                ip_address="203.0.113.9",
                user_agent="pytest"
            ))
        assert entry.id is not None
        assert entry.accessed_at is not None

        async with sessions.transaction_context() as db:
            entries = await repository.get_for_short_code(db, "logged1")
        assert [e.ip_address for e in entries] == ["203.0.113.9"]
