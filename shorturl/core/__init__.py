"""Core module for the URL shortener application."""

from shorturl.core.config import settings

__all__ = ["settings"]
