"""
Quote domain model.

Quotes are transient: they are consumed by the execution pass and by the
investment refresh, and never persisted directly.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from mocktrade.core.types.financial import ZERO, Money, calculate_change_percent


@dataclass(frozen=True)
class Quote:
    """A point-in-time price for one symbol."""

    symbol: str
    price: Money
    previous_close: Money
    timestamp: datetime
    price_is_current: bool = True
    dividend_per_share: Money = ZERO
    name: str = ""

    def as_stale(self) -> "Quote":
        """Return a copy flagged as not current."""
        return replace(self, price_is_current=False)

    def day_change_percent(self) -> float:
        return calculate_change_percent(self.price, self.previous_close)

    def dividend_yield(self) -> float:
        """Annual dividend as a fraction of the current price."""
        if self.price.micro_cents <= 0:
            return 0.0
        return self.dividend_per_share.micro_cents / self.price.micro_cents

    def log_context(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": str(self.price),
            "price_is_current": self.price_is_current,
        }
