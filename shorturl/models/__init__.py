"""
Data models for the URL shortener application.

This module imports and exports all SQLModel models used in the application.
"""

from sqlmodel import SQLModel

# Table models in dependency order (parent before child)
from shorturl.models.url import ShortURL, ShortURLBase, ShortURLCreate
from shorturl.models.access_log import AccessLog, AccessLogBase, AccessLogCreate

__all__ = [
    # Short URL models
    "ShortURL",
    "ShortURLBase",
    "ShortURLCreate",

    # Access log models
    "AccessLog",
    "AccessLogBase",
    "AccessLogCreate",
]
