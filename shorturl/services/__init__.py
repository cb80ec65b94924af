"""Services module for business logic."""
from shorturl.services.access_log import AccessLogService
from shorturl.services.codes import CodeGenerator, encode_base62
from shorturl.services.counter import ClickCounter
from shorturl.services.shortener import ResolutionService

__all__ = [
    "AccessLogService",
    "ClickCounter",
    "CodeGenerator",
    "encode_base62",
    "ResolutionService",
]
