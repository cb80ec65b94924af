"""URL shortener data models.

This module defines the ShortURL model for storing shortened URLs in the database.
All timestamps are timezone-aware UTC.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import field_validator
from sqlalchemy import DateTime, Index
from sqlmodel import Field, SQLModel

from shorturl.core.config import settings


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive input is taken as UTC already.

    SQLite hands back naive values even for timezone-aware columns, so reads
    go through this as well.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ShortURLBase(SQLModel):
    """Base model for short URL data."""

    long_url: str = Field(
        description="The original (long) URL to redirect to"
    )
    is_custom: bool = Field(
        default=False,
        description="Whether the short code was custom-defined by the user"
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        description="When this short URL expires (null means no expiration)"
    )
    click_count: int = Field(
        default=0,
        ge=0,
        description="Counter for the number of successful resolutions"
    )

    # Validator to ensure long_url is stored as string
    @field_validator("long_url", mode="before")
    def ensure_str_url(cls, v):
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @field_validator("expires_at", mode="before")
    def ensure_utc(cls, v):
        if isinstance(v, datetime):
            return to_utc(v)
        return v


class ShortURL(ShortURLBase, table=True):
    """
    Short URL model for storing shortened URLs in the database.

    The short code is the primary key, so the database itself rejects a
    second record with the same code. That insert conflict is the only
    authoritative uniqueness check in the system.
    """

    __tablename__ = "short_urls"

    short_code: str = Field(
        primary_key=True,
        max_length=32,
        description="Unique code for the shortened URL"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Timestamp when this short URL was created"
    )

    __table_args__ = (
        # Newest-first listing
        Index("ix_short_urls_created_at", "created_at"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the short URL has expired.

        A record expiring exactly at ``now`` counts as expired.

        Returns:
            bool: True if the URL has expired, False otherwise
        """
        if self.expires_at is None:
            return False
        return to_utc(self.expires_at) <= (to_utc(now) or utc_now())

    def remaining_ttl(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """Time left until expiry, None for records that never expire."""
        if self.expires_at is None:
            return None
        return to_utc(self.expires_at) - (to_utc(now) or utc_now())

    @classmethod
    def generate_expiration(cls, days: Optional[int] = None) -> Optional[datetime]:
        """Generate an expiration date based on the given number of days.

        Args:
            days: Number of days until expiration, or None for the configured default

        Returns:
            Optional[datetime]: Expiration date or None if no expiration applies
        """
        if days is None:
            days = settings.DEFAULT_EXPIRATION_DAYS

        if days is None:
            return None
        return utc_now() + timedelta(days=days)


class ShortURLCreate(ShortURLBase):
    """Schema for creating a new short URL."""
    short_code: str

