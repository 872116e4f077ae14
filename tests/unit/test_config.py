"""
Unit tests for EngineSettings.
"""

import pytest

from mocktrade.core.config import EngineSettings
from mocktrade.core.exceptions.trading import ConfigurationError


class TestEngineSettings:
    """Test defaults, validation and environment overrides."""

    def test_should_use_defaults(self) -> None:
        settings = EngineSettings()

        assert settings.poll_interval_seconds == 60
        assert settings.snapshot_granularity_seconds == 60
        assert settings.quote_timeout_seconds == 10.0
        assert settings.market_calendar == "XNYS"

    def test_should_read_overrides_from_environment(self, monkeypatch) -> None:
        # Arrange
        monkeypatch.setenv("MOCKTRADE_POLL_INTERVAL_SECONDS", "30")
        monkeypatch.setenv("MOCKTRADE_DATABASE_URL", "sqlite://")

        # Act
        settings = EngineSettings.from_env()

        # Assert
        assert settings.poll_interval_seconds == 30
        assert settings.database_url == "sqlite://"

    def test_should_honour_custom_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("PAPER_SNAPSHOT_RETENTION_DAYS", "30")

        settings = EngineSettings.from_env(prefix="PAPER_")

        assert settings.snapshot_retention_days == 30

    def test_should_prefer_explicit_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("MOCKTRADE_POLL_INTERVAL_SECONDS", "30")

        settings = EngineSettings.from_env(poll_interval_seconds=5)

        assert settings.poll_interval_seconds == 5

    def test_should_raise_configuration_error_for_invalid_values(self, monkeypatch) -> None:
        monkeypatch.setenv("MOCKTRADE_QUOTE_TIMEOUT_SECONDS", "0")

        with pytest.raises(ConfigurationError, match="Invalid engine settings"):
            EngineSettings.from_env()

    def test_should_normalize_market_calendar(self) -> None:
        assert EngineSettings.from_env(market_calendar=" xnas ").market_calendar == "XNAS"

    def test_should_reject_unknown_market_calendar(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown market calendar"):
            EngineSettings.from_env(market_calendar="NOPE")

    def test_should_be_immutable(self) -> None:
        settings = EngineSettings()
        with pytest.raises(Exception):
            settings.poll_interval_seconds = 5
