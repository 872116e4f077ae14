"""
Exchange session hours.

Backed by an exchange_calendars calendar (NYSE by default), so holidays and
early closes are taken into account.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import exchange_calendars as xcals
import pandas as pd

from mocktrade.core.constants import (
    DEFAULT_MARKET_CALENDAR,
    MARKET_CALENDAR_START,
    MARKET_CALENDAR_YEARS_AHEAD,
    POLL_PADDING_MINUTES,
)

_ONE_MINUTE = pd.Timedelta(minutes=1)


@lru_cache(maxsize=8)
def get_calendar(code: str) -> Any:
    """Load an exchange calendar by its exchange_calendars code."""
    end = f"{datetime.now(UTC).year + MARKET_CALENDAR_YEARS_AHEAD}-12-31"
    return xcals.get_calendar(code, start=MARKET_CALENDAR_START, end=end)


def _to_minute(moment: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(moment)
    ts = ts.tz_localize(UTC) if ts.tzinfo is None else ts.tz_convert(UTC)
    return ts.floor("min")


def _to_datetime(ts: pd.Timestamp) -> datetime:
    return ts.to_pydatetime().astimezone(UTC)


class MarketClock:
    """Answers market-hours questions for a single exchange."""

    def __init__(
        self,
        calendar: str = DEFAULT_MARKET_CALENDAR,
        poll_padding: timedelta = timedelta(minutes=POLL_PADDING_MINUTES),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.calendar_code = calendar
        self.calendar = get_calendar(calendar)
        self.poll_padding = poll_padding
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], datetime] | None = None) -> "MarketClock":
        return cls(calendar=settings.market_calendar, clock=clock)

    def now(self) -> datetime:
        return self._clock()

    def _minute(self, moment: datetime | None) -> pd.Timestamp:
        return _to_minute(moment if moment is not None else self._clock())

    def is_open(self, moment: datetime | None = None) -> bool:
        return bool(self.calendar.is_open_on_minute(self._minute(moment)))

    def is_in_poll_time(self, moment: datetime | None = None) -> bool:
        """Open session plus a short padding after the close for closing prints."""
        minute = self._minute(moment)
        if self.calendar.is_open_on_minute(minute):
            return True
        last_close = self.calendar.previous_close(minute + _ONE_MINUTE)
        return minute - last_close < pd.Timedelta(self.poll_padding)

    def next_open(self, moment: datetime | None = None) -> datetime:
        """Start of the first session strictly after ``moment``, in UTC."""
        return _to_datetime(self.calendar.next_open(self._minute(moment)))

    def last_open(self, moment: datetime | None = None) -> datetime:
        """Start of the most recent session at or before ``moment``, in UTC."""
        return _to_datetime(self.calendar.previous_open(self._minute(moment) + _ONE_MINUTE))

    def is_price_current(self, quote_time: datetime, moment: datetime | None = None) -> bool:
        """A price is current when it was printed during or after the latest session."""
        return quote_time >= self.last_open(moment)
