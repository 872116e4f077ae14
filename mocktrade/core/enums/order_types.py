"""
Order side, kind and status enumerations.

This module defines the allowed order attributes and their lifecycle.
"""

from enum import StrEnum


class OrderSide(StrEnum):
    """
    Allowed order sides.

    Defines whether an order acquires or disposes of shares.
    """

    BUY = "buy"
    SELL = "sell"

    @property
    def is_buy(self) -> bool:
        """Check if side is a buy."""
        return self == self.BUY

    @property
    def is_sell(self) -> bool:
        """Check if side is a sell."""
        return self == self.SELL

    def opposite(self) -> "OrderSide":
        """Get the opposite side."""
        return self.SELL if self.is_buy else self.BUY  # type: ignore[return-value]


class OrderKind(StrEnum):
    """
    Allowed order kinds.

    Market orders fill at the current price, limit orders only at the trigger
    price or better, stop orders once the price moves through the trigger.
    """

    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"

    @property
    def requires_trigger_price(self) -> bool:
        """Check if the kind needs a trigger price."""
        return self in (self.LIMIT, self.STOP)


class OrderStatus(StrEnum):
    """
    Order lifecycle states.

    An order leaves OPEN exactly once and never returns to it.
    """

    OPEN = "open"
    FILLED = "filled"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if the status is a final state."""
        return self != self.OPEN
