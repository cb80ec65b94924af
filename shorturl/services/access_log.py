"""Access log recording for followed redirects."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from shorturl.db.session import SessionManager
from shorturl.models.access_log import AccessLog, AccessLogCreate
from shorturl.repositories.access_log_repository import AccessLogRepository
from shorturl.repositories.base import RepositoryError

logger = logging.getLogger(__name__)


class AccessLogService:
    """Writes one access log row per redirect, in its own transaction."""

    def __init__(self, access_log_repository: AccessLogRepository, sessions: SessionManager):
        self.access_log_repository = access_log_repository
        self.sessions = sessions

    async def record(
        self,
        short_code: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[AccessLog]:
        """
        Record a redirect. Failures are logged and None is returned.

        Args:
            short_code: The code that was followed
            ip_address: Client address, if known
            user_agent: Client user agent, truncated to the column size

        Returns:
            The stored AccessLog, or None if it could not be written
        """
        data = AccessLogCreate(
            short_code=short_code,
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent[:1024] if user_agent else None,
        )
        try:
            async with self.sessions.transaction_context() as db:
                return await self.access_log_repository.create_access_log(db, data)
        except (RepositoryError, SQLAlchemyError) as e:
            logger.error(f"Failed to record access to {short_code}: {e}")
            return None
