"""Repositories module for database access."""
from shorturl.repositories.base import BaseRepository, DuplicateEntityError, RepositoryError
from shorturl.repositories.url_repository import URLRepository
from shorturl.repositories.access_log_repository import AccessLogRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "DuplicateEntityError",
    "URLRepository",
    "AccessLogRepository",
]
