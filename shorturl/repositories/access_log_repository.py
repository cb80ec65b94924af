"""Access log repository.

Writes one AccessLog row per followed redirect and reads them back per code.
"""

from typing import Any, Dict, List, Union

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.models.access_log import AccessLog, AccessLogCreate
from shorturl.repositories.base import BaseRepository, RepositoryError


class AccessLogRepository(BaseRepository[AccessLog, AccessLogCreate]):
    """Repository for AccessLog model database operations."""

    def __init__(self):
        super().__init__(AccessLog)

    async def create_access_log(
        self,
        db: AsyncSession,
        data: Union[AccessLogCreate, Dict[str, Any]]
    ) -> AccessLog:
        """
        Record a redirect.

        Raises:
            RepositoryError: On database errors, including an unknown short code
        """
        try:
            return await self.create(db, data)
        except IntegrityError as e:
            raise RepositoryError(f"Error recording access log: {e}") from e

    async def get_for_short_code(
        self,
        db: AsyncSession,
        short_code: str,
        limit: int = 100
    ) -> List[AccessLog]:
        """Most recent access log rows for a short code."""
        return await self.get_all(
            db,
            limit=limit,
            order_by=desc(self.model_type.accessed_at),
            conditions=[self.model_type.short_code == short_code],
        )
