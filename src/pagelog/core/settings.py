"""Settings for pagelog.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    Every knob the recorder and its HTTP host need lives here, read once
    at startup from ``PAGELOG_*`` environment variables or a ``.env`` file.

Examples:
    >>> from pagelog.core.settings import PagelogSettings
    >>> settings = PagelogSettings(database_url="sqlite:///:memory:")
    >>> settings.record_requests
    True

Tags:
    settings, configuration, pydantic, environment, pagelog

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PagelogSettings(BaseSettings):
    """Settings for the pagelog server, recorder and CLI.

    Order of precedence (highest → lowest):
        1. Environment variables (``PAGELOG_DATABASE_URL``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGELOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    debug: bool = Field(default=False, description="Expose exception details in 500 responses")

    # ── Observability ────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool | None = Field(
        default=None,
        description="JSON log output; None picks JSON when stdout is not a TTY",
    )

    # ── API ──────────────────────────────────────────────────────────────
    api_title: str = Field(default="pagelog", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///pagelog.db",
        description="SQLAlchemy connection URL",
    )
    echo_sql: bool = Field(default=False, description="Log every SQL statement via SQLAlchemy")

    # ── Subscribers ──────────────────────────────────────────────────────
    record_requests: bool = Field(
        default=True,
        description="Persist one page_requests row per completed request",
    )
    log_requests: bool = Field(
        default=True,
        description="Log one line per completed request",
    )
    log_sql: bool = Field(
        default=False,
        description="Log each executed statement (DEBUG) through the notifier",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> PagelogSettings:
    """Cached settings — loaded once per process."""
    return PagelogSettings()
