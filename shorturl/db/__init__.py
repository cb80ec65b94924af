"""Database module for the URL shortener application."""
from shorturl.db.base import engine, get_engine, init_models, DatabaseHealthCheck
from shorturl.db.session import get_db, SessionManager

__all__ = [
    "engine",
    "get_engine",
    "init_models",
    "DatabaseHealthCheck",
    "get_db",
    "SessionManager",
]
