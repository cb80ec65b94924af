"""Tests for the access log service."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from shorturl.repositories.access_log_repository import AccessLogRepository
from shorturl.services.access_log import AccessLogService
from tests.utils import create_test_url


@pytest.mark.service
class TestAccessLogService:

    @pytest.mark.asyncio
    async def test_record(self, sessions):
        await create_test_url(sessions, short_code="visit01")
        service = AccessLogService(AccessLogRepository(), sessions)

        entry = await service.record("visit01", "198.51.100.4", "Mozilla/5.0 " + "x" * 2000)

        assert entry is not None
        assert entry.short_code == "visit01"
        assert len(entry.user_agent) == 1024

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self, sessions):
        repository = AccessLogRepository()
        repository.create_access_log = AsyncMock(side_effect=OperationalError("insert", {}, Exception("db gone")))
        service = AccessLogService(repository, sessions)

        assert await service.record("visit02", None, None) is None
