"""Application configuration module.

This module contains settings for the URL shortener application,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import logging
import string
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "Short URL Server"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Maps long URLs to short codes and resolves them back"

    # API Configuration
    BASE_URL: str = "http://localhost:8000"  # Prefix for generated short URLs
    API_PREFIX: str = "/api"
    DEBUG: bool = False

    # Short code generation
    URL_CODE_LENGTH: int = 7  # Characters kept from the encoded digest
    URL_CODE_CHARS: str = string.ascii_letters + string.digits  # Encoding alphabet
    URL_CUSTOM_CODE_MAX_LENGTH: int = 20
    CODE_HASH_ALGORITHM: str = "sha256"
    CODE_GENERATION_MAX_ATTEMPTS: int = 5

    # Default URL expiration (in days)
    DEFAULT_EXPIRATION_DAYS: Optional[int] = None  # None means never expire

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "short_url"
    DATABASE_URL: Optional[str] = None  # Full SQLAlchemy URL, overrides POSTGRES_*

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    # Redis settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0
    REDIS_URL: Optional[str] = None  # Full redis URL, overrides REDIS_*
    REDIS_KEY_PREFIX: str = "shorturl"
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_SOCKET_TIMEOUT: float = 1.0  # Seconds per command before the cache tier counts as down
    REDIS_SOCKET_CONNECT_TIMEOUT: float = 1.0

    # Cache settings
    CACHE_ENABLED: bool = True  # False wires the in-process backends (single instance only)
    CACHE_TIMEOUT: int = 3600  # Upper bound on cache entry lifetime, 0 = unbounded

    # Collision filter (Bloom filter) sizing
    BLOOM_CAPACITY: int = 1_000_000
    BLOOM_ERROR_RATE: float = 0.01

    # Click counter locking
    LOCK_WAIT_TIMEOUT: float = 2.0  # Seconds to wait for a counter lock
    LOCK_LEASE_TIMEOUT: float = 5.0  # Seconds before a held lock auto-expires

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name}:{line} | {message}"
    LOG_JSON: bool = True

    # Validators
    @field_validator("DEFAULT_EXPIRATION_DAYS", mode="before")
    def validate_expiration_days(cls, v: Any) -> Optional[int]:
        """Convert empty string to None for DEFAULT_EXPIRATION_DAYS."""
        if v == "" or v is None:
            return None
        return int(v)

    @field_validator("URL_CODE_CHARS")
    def validate_code_chars(cls, v: str) -> str:
        if len(v) < 2 or len(set(v)) != len(v):
            raise ValueError("URL_CODE_CHARS needs at least two distinct characters and no repeats")
        return v

    @field_validator("BLOOM_ERROR_RATE")
    def validate_error_rate(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError("BLOOM_ERROR_RATE must be between 0 and 1")
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @computed_field
    def REDIS_URI(self) -> str:
        """Construct the Redis URI from settings or use override."""
        if self.REDIS_URL:
            return self.REDIS_URL

        # Use empty string if no password is provided
        password_part = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{password_part}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


# Create a singleton instance of the settings
settings = Settings()
