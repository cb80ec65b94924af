"""
Access log data models.

One row is written for every successful redirect through the public endpoint.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlmodel import Field, SQLModel

from shorturl.models.url import utc_now


class AccessLogBase(SQLModel):
    """Base model for access log data."""

    accessed_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Timestamp when the short URL was followed"
    )
    ip_address: Optional[str] = Field(
        default=None,
        description="IP address of the visitor",
        max_length=45  # Support both IPv4 and IPv6 addresses
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="User agent string of the visitor's browser/device",
        max_length=1024
    )


class AccessLog(AccessLogBase, table=True):
    """
    Access log model for redirects through short URLs.

    Rows are written from background tasks after the redirect response has
    been sent. There is no ORM relationship back to ShortURL; the foreign key
    with cascade delete is enough for the database to keep the two consistent.
    """

    __tablename__ = "access_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    short_code: str = Field(
        sa_column=Column(
            String(32),
            ForeignKey("short_urls.short_code", ondelete="CASCADE"),
            nullable=False,
        ),
        description="Short code that was followed"
    )

    __table_args__ = (
        Index("ix_access_logs_short_code_accessed_at", "short_code", "accessed_at"),
    )


class AccessLogCreate(AccessLogBase):
    """Schema for creating an access log entry."""
    short_code: str

