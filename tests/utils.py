"""Test utilities for URL shortener tests."""

import random
import string
from datetime import datetime
from typing import Any, Dict, Optional

from shorturl.models.url import ShortURL


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8).lower()}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


def create_test_url_data(
    long_url: Optional[str] = None,
    short_code: Optional[str] = None,
    is_custom: bool = False,
    expires_at: Optional[datetime] = None,
    click_count: int = 0
) -> Dict[str, Any]:
    """Create test data dict for a ShortURL."""
    return {
        "long_url": long_url or random_url(),
        "short_code": short_code or random_string(7),
        "is_custom": is_custom,
        "expires_at": expires_at,
        "click_count": click_count
    }


async def create_test_url(
    sessions,
    long_url: Optional[str] = None,
    short_code: Optional[str] = None,
    is_custom: bool = False,
    expires_at: Optional[datetime] = None,
    click_count: int = 0
) -> ShortURL:
    """Create and commit a test ShortURL in the database."""
    url = ShortURL(**create_test_url_data(
        long_url=long_url,
        short_code=short_code,
        is_custom=is_custom,
        expires_at=expires_at,
        click_count=click_count
    ))
    async with sessions.transaction_context() as db:
        db.add(url)
        await db.flush()
        await db.refresh(url)
    return url
