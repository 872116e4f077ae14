"""
Engine configuration.

Settings are validated with pydantic and can be overridden from the
environment (``MOCKTRADE_POLL_INTERVAL_SECONDS=30`` and so on).
"""

from typing import Any

import exchange_calendars as xcals
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mocktrade.core.constants import (
    DEFAULT_MARKET_CALENDAR,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_QUOTE_TIMEOUT_SECONDS,
    DEFAULT_SNAPSHOT_GRANULARITY_SECONDS,
    DEFAULT_SNAPSHOT_RETENTION_DAYS,
)
from mocktrade.core.exceptions.trading import ConfigurationError


class EngineSettings(BaseSettings):
    """Runtime settings for the execution and snapshot engine."""

    model_config = SettingsConfigDict(env_prefix="MOCKTRADE_", frozen=True)

    database_url: str = Field(default="sqlite:///mocktrade.db", description="SQLAlchemy URL")
    poll_interval_seconds: int = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS, ge=1, description="Open-market poll cadence"
    )
    snapshot_granularity_seconds: int = Field(
        default=DEFAULT_SNAPSHOT_GRANULARITY_SECONDS,
        ge=1,
        description="Snapshot timestamps are truncated down to this boundary",
    )
    quote_timeout_seconds: float = Field(
        default=DEFAULT_QUOTE_TIMEOUT_SECONDS, gt=0, description="Bound on quote retrieval"
    )
    snapshot_retention_days: int = Field(
        default=DEFAULT_SNAPSHOT_RETENTION_DAYS, ge=1, description="Snapshot purge cutoff"
    )
    market_calendar: str = Field(
        default=DEFAULT_MARKET_CALENDAR, description="exchange_calendars code, e.g. XNYS"
    )

    @field_validator("market_calendar")
    @classmethod
    def validate_market_calendar(cls, v: str) -> str:
        """Validate that the calendar code is known to exchange_calendars."""
        v = v.strip().upper()
        if v not in xcals.get_calendar_names():
            raise ValueError(f"Unknown market calendar: {v}")
        return v

    @classmethod
    def from_env(cls, prefix: str = "MOCKTRADE_", **overrides: Any) -> "EngineSettings":
        """Build settings from environment variables.

        Args:
            prefix: Environment variable prefix
            **overrides: Explicit values that win over the environment

        Raises:
            ConfigurationError: If any value fails validation
        """
        try:
            return cls(_env_prefix=prefix, **overrides)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid engine settings: {e}") from e
