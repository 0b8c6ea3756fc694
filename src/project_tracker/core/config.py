"""Configuration management for the project tracker.

Settings come from environment variables (``TRACKER_`` prefix), an optional
``.env`` file, or keyword arguments, validated by Pydantic Settings.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerConfig(BaseSettings):
    """Main configuration for the MCP project tracker.

    Example:
        ```python
        # Using environment variables
        # TRACKER_DATABASE_URL=sqlite+aiosqlite:///./tracker.db
        # TRACKER_LOG_LEVEL=DEBUG

        config = TrackerConfig()

        # Or programmatically
        config = TrackerConfig(database_url="sqlite+aiosqlite:///:memory:")
        ```

    Attributes:
        database_url: SQLAlchemy async URL of the backing store
        request_timeout: Client-side wait for a response, in seconds
        log_level: Level of the stderr log handler
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked credentials."""
        return re.sub(r"://([^:/]+):([^@]+)@", r"://\1:***@", super().__repr__())

    ##########################
    # Database Configuration #
    ##########################

    database_url: str = Field(
        default="sqlite+aiosqlite:///./project_tracker.db",
        description="Async SQLAlchemy URL of the project/task store",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL statement logging (use only in development)",
    )

    enable_wal: bool = Field(
        default=True,
        description="Switch file-backed SQLite databases to WAL journal mode",
    )

    ########################
    # Server Configuration #
    ########################

    server_name: str = Field(
        default="mcp-project-tracker",
        min_length=1,
        description="Name reported in the initialize handshake",
    )

    server_version: str = Field(
        default="1.0.0",
        min_length=1,
        description="Version reported in the initialize handshake",
    )

    protocol_version: str = Field(
        default="2024-11-05",
        description="MCP protocol revision announced to clients",
    )

    read_chunk_size: int = Field(
        default=65536,
        ge=1,
        description="Maximum bytes read from stdin per iteration",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level for the stderr handler",
    )

    ########################
    # Client Configuration #
    ########################

    request_timeout: float = Field(
        default=8.0,
        gt=0,
        description="Seconds a client waits for a response before failing the request",
    )

    ##############
    # Validators #
    ##############

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate the database URL and switch sync SQLite URLs to aiosqlite.

        Only the ``sqlite+aiosqlite`` driver is supported by the store. A
        plain ``sqlite://`` URL is rewritten to it with a warning.

        Raises:
            ValueError: If the URL is not a SQLite URL, or names another
                SQLite driver
        """
        import warnings

        from project_tracker.utils.db_compat import (
            ASYNC_SQLITE_SCHEME,
            DbDialect,
            detect_dialect,
            to_async_sqlite_url,
            url_scheme,
        )

        url_str = str(v).strip()
        if detect_dialect(url_str) != DbDialect.SQLITE:
            raise ValueError(
                f"Unsupported database URL {url_str!r}: expected sqlite+aiosqlite://"
            )
        if url_scheme(url_str) == "sqlite":
            warnings.warn(
                "Database URL uses the synchronous sqlite:// scheme. "
                "Switching to sqlite+aiosqlite://.",
                stacklevel=4,
            )
            url_str = to_async_sqlite_url(url_str)
        if url_scheme(url_str) != ASYNC_SQLITE_SCHEME:
            raise ValueError(
                f"Unsupported SQLite driver in {url_str!r}: expected sqlite+aiosqlite://"
            )
        return url_str


__all__ = ["TrackerConfig"]
