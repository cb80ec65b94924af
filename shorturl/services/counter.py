"""Click counter updates serialized by a per-code lock."""

import logging
from typing import Optional

from shorturl.cache.keys import CacheKeySchema
from shorturl.cache.locks import LockProvider
from shorturl.db.session import SessionManager
from shorturl.repositories.url_repository import URLRepository

logger = logging.getLogger(__name__)


class ClickCounter:
    """
    Increments ``click_count`` for one code at a time.

    Every increment of a code runs under the lock ``lock:count:<code>``, so
    increments of the same code never interleave, on this instance or any
    other sharing the lock backend. Different codes use different locks.
    """

    def __init__(
        self,
        url_repository: URLRepository,
        sessions: SessionManager,
        locks: LockProvider,
        keys: CacheKeySchema,
    ):
        self.url_repository = url_repository
        self.sessions = sessions
        self.locks = locks
        self.keys = keys

    async def increment(self, short_code: str) -> Optional[int]:
        """
        Add one to the code's click count.

        Returns:
            The new count, or None if the code no longer exists

        Raises:
            LockUnavailableError: If the lock was not acquired in time
            RepositoryError: On database errors
        """
        async with self.locks.hold(self.keys.count_lock_key(short_code)):
            async with self.sessions.transaction_context() as db:
                url = await self.url_repository.increment_click_count(db, short_code)
                if url is None:
                    logger.debug(f"Click for unknown code {short_code} dropped")
                    return None
                return url.click_count
