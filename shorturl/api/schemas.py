"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization. Every JSON response of the shortener routes is
wrapped in the same ``{code, message, data}`` envelope.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DataT = TypeVar("DataT")

# Envelope result codes
SUCCESS_CODE = 0
ERROR_CODE = 1


class APIResult(BaseModel, Generic[DataT]):
    """Response envelope shared by the shortener endpoints."""
    code: int = SUCCESS_CODE
    message: str = "success"
    data: Optional[DataT] = None

    @classmethod
    def success(cls, data: Optional[DataT] = None) -> "APIResult[DataT]":
        return cls(code=SUCCESS_CODE, message="success", data=data)

    @classmethod
    def error(cls, message: str, code: int = ERROR_CODE) -> "APIResult[DataT]":
        return cls(code=code, message=message, data=None)


class URLCreateRequest(BaseModel):
    """Request schema for creating a shortened URL."""
    long_url: HttpUrl
    custom_code: Optional[str] = Field(
        None,
        pattern=r"^[a-zA-Z0-9-]{1,20}$",
        description="Caller-chosen short code: letters, digits and hyphens"
    )
    expires_at: Optional[datetime] = Field(
        None,
        description="Expiry timestamp; naive values are taken as UTC"
    )

    # Convert HttpUrl to string for SQLAlchemy compatibility
    @field_validator("long_url")
    def convert_url_to_str(cls, v):
        return str(v)


class URLResponse(BaseModel):
    """Response schema for URL information."""
    model_config = ConfigDict(from_attributes=True)

    short_code: str
    long_url: str
    short_url: str  # Full URL including base domain
    created_at: datetime
    expires_at: Optional[datetime] = None
    is_custom: bool
    click_count: int


class URLQueryRequest(BaseModel):
    """Request schema for paging through URLs."""
    page_num: int = Field(1, ge=1, description="1-based page number")
    page_size: int = Field(10, ge=1, le=100, description="Records per page")
    short_code: Optional[str] = Field(None, description="Substring of the short code")
    long_url: Optional[str] = Field(None, description="Substring of the long URL")


class PageResult(BaseModel, Generic[DataT]):
    """One page of records plus the paging position."""
    records: List[DataT]
    total: int
    size: int
    current: int
    pages: int
