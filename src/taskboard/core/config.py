"""Configuration management for taskboard.

Settings are read from environment variables with the ``TASKBOARD_`` prefix
(and from a local ``.env`` file), validated with Pydantic Settings.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskboardConfig(BaseSettings):
    """Main configuration for the taskboard service.

    Example:
        ```python
        # TASKBOARD_JWT_SECRET=...
        # TASKBOARD_DATABASE_URL=postgresql+asyncpg://...
        config = TaskboardConfig()

        # Or programmatically
        config = TaskboardConfig(
            database_url="sqlite+aiosqlite:///./taskboard.db",
            jwt_secret="a-very-long-secret-of-at-least-32-chars",
        )
        ```

    Attributes:
        database_url: Async SQLAlchemy URL for the persistent store
        storage_backend: ``sqlalchemy`` (default) or ``memory``
        jwt_secret: Signing key for bearer tokens
        max_projects_per_user: Project cap enforced on creation
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked secrets."""
        result = super().__repr__()
        result = re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", result)
        result = re.sub(
            r"(jwt_secret|secret|password)=(?:'[^']*'|[^\s,)]+)",
            r"\1='***'",
            result,
            flags=re.IGNORECASE,
        )
        return result

    ###########
    # Storage #
    ###########

    storage_backend: Literal["sqlalchemy", "memory"] = Field(
        default="sqlalchemy",
        description="Which store implementation backs the service",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./taskboard.db",
        description="Async SQLAlchemy database URL",
    )

    database_pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size",
    )

    database_max_overflow: int = Field(
        default=20,
        ge=0,
        le=200,
        description="Max overflow connections beyond pool size",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL query logging (use only in development)",
    )

    ##################
    # Authentication #
    ##################

    jwt_secret: str = Field(
        ...,
        description="Secret key for signing bearer tokens (required)",
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )

    token_ttl_minutes: int = Field(
        default=60 * 24 * 30,
        ge=1,
        description="Lifetime of issued bearer tokens in minutes",
    )

    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor for password hashing",
    )

    min_password_length: int = Field(
        default=6,
        ge=1,
        le=72,
        description="Minimum accepted password length at registration",
    )

    ################
    # Domain rules #
    ################

    max_projects_per_user: int = Field(
        default=4,
        ge=1,
        description="Maximum number of projects a single user may own",
    )

    #########
    # Debug #
    #########

    debug: bool = Field(
        default=False,
        description="Include internal error details in 500 responses",
    )

    ##############
    # Validators #
    ##############

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Normalise the URL and warn about synchronous driver schemes."""
        import warnings

        from taskboard.utils.db_compat import detect_dialect

        url_str = str(v).rstrip("/")
        detect_dialect(url_str)

        _SYNC_ONLY_SCHEMES = ("postgresql://", "sqlite://", "mysql://")
        if any(url_str.startswith(s) for s in _SYNC_ONLY_SCHEMES):
            warnings.warn(
                "Database URL uses a synchronous driver scheme. "
                "Use an async driver instead (e.g. postgresql+asyncpg, "
                "sqlite+aiosqlite, mysql+aiomysql).",
                stacklevel=4,
            )
        return url_str

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("jwt_secret must be at least 32 characters long")
        return v

    ##################
    # Helper Methods #
    ##################

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(minutes=self.token_ttl_minutes)


__all__ = ["TaskboardConfig"]
