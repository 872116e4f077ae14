"""
Shared fixtures: an in-memory database and a controllable clock.
"""

from datetime import UTC, datetime, timedelta

import pytest

from mocktrade.infrastructure.persistence import Database

# Wednesday 10:00 in New York, market open
MARKET_OPEN_NOW = datetime(2024, 1, 3, 15, 0, tzinfo=UTC)
# Saturday, market closed
WEEKEND_NOW = datetime(2024, 1, 6, 12, 0, tzinfo=UTC)
# Monday 09:30 in New York
MONDAY_OPEN = datetime(2024, 1, 8, 14, 30, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = MARKET_OPEN_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def database():
    """Fresh in-memory database with the schema created."""
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
