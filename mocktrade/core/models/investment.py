"""
Investment domain model.

An investment is an account's holding in one symbol.
"""

from dataclasses import dataclass
from datetime import datetime

from mocktrade.core.exceptions.trading import InvalidArgumentError
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import ZERO, Money


@dataclass
class Investment:
    """Shares of one symbol held by one account.

    ``value`` and ``prev_day_value`` are derived from the last applied quote
    so they always agree with ``quantity``.
    """

    account_id: int
    symbol: str
    quantity: int
    cost_basis: Money
    price: Money = ZERO
    prev_day_close: Money = ZERO
    last_trade_time: datetime | None = None
    price_is_current: bool = False
    id: int | None = None

    @property
    def value(self) -> Money:
        """Current market value of the holding."""
        return self.price * self.quantity

    @property
    def prev_day_value(self) -> Money:
        """Value of the holding at the previous close."""
        return self.prev_day_close * self.quantity

    def today_change(self) -> Money:
        return self.value - self.prev_day_value

    def apply_quote(self, quote: Quote) -> None:
        """Refresh prices from a quote for the same symbol.

        Raises:
            InvalidArgumentError: If the quote is for another symbol
        """
        if quote.symbol != self.symbol:
            raise InvalidArgumentError(
                f"Quote symbol {quote.symbol} does not match investment symbol {self.symbol}"
            )
        self.price = quote.price
        self.prev_day_close = quote.previous_close
        self.last_trade_time = quote.timestamp
        self.price_is_current = quote.price_is_current

    @classmethod
    def open(cls, account_id: int, symbol: str, quantity: int, price: Money,
             timestamp: datetime, previous_close: Money | None = None) -> "Investment":
        """Create a new holding from a buy fill."""
        return cls(
            account_id=account_id,
            symbol=symbol,
            quantity=quantity,
            cost_basis=price * quantity,
            price=price,
            prev_day_close=previous_close if previous_close is not None else price,
            last_trade_time=timestamp,
            price_is_current=True,
        )
