"""
Order and OrderResult domain models.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from mocktrade.core.enums import OrderKind, OrderSide, OrderStatus
from mocktrade.core.exceptions.trading import InvalidArgumentError
from mocktrade.core.types.financial import Money
from mocktrade.core.utils.validation import validate_price, validate_quantity, validate_symbol

# Fields fixed once the order exists
_IMMUTABLE_FIELDS = frozenset({"account_id", "symbol", "side", "kind", "quantity", "trigger_price"})


@dataclass
class Order:
    """A pending instruction to buy or sell shares for an account.

    Orders are never deleted. Their terms never change after creation and
    their status moves from OPEN to a terminal state exactly once.
    """

    account_id: int
    symbol: str
    side: OrderSide
    kind: OrderKind
    quantity: int
    trigger_price: Money | None = None
    status: OrderStatus = OrderStatus.OPEN
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    message: str | None = None
    filled_price: Money | None = None
    filled_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "_initialized", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS and getattr(self, "_initialized", False):
            raise AttributeError(f"Order.{name} cannot change after creation")
        object.__setattr__(self, name, value)

    @classmethod
    def create(
        cls,
        account_id: int,
        symbol: str,
        side: OrderSide,
        kind: OrderKind,
        quantity: int,
        trigger_price: Money | None = None,
    ) -> "Order":
        """Validate and build a new OPEN order.

        Raises:
            InvalidArgumentError: If any term is invalid
        """
        symbol = validate_symbol(symbol)
        quantity = validate_quantity(quantity)
        side = OrderSide(side)
        kind = OrderKind(kind)

        if kind.requires_trigger_price:
            if trigger_price is None:
                raise InvalidArgumentError(f"{kind} order requires a trigger price")
            trigger_price = validate_price(trigger_price, "trigger_price")
        elif trigger_price is not None:
            raise InvalidArgumentError("Market orders do not take a trigger price")

        return cls(
            account_id=account_id,
            symbol=symbol,
            side=side,
            kind=kind,
            quantity=quantity,
            trigger_price=trigger_price,
        )

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.OPEN

    def transition_to(self, status: OrderStatus, message: str | None = None) -> None:
        """Move the order to a terminal status.

        Raises:
            InvalidArgumentError: If the order already left OPEN or the target is OPEN
        """
        if not self.is_open:
            raise InvalidArgumentError(f"Order {self.id} is already {self.status}")
        if not status.is_terminal:
            raise InvalidArgumentError(f"Order {self.id} cannot move to {status}")
        self.status = status
        self.message = message

    def mark_filled(self, price: Money, timestamp: datetime) -> None:
        self.transition_to(OrderStatus.FILLED)
        self.filled_price = price
        self.filled_at = timestamp

    def log_context(self) -> dict:
        return {
            "order_id": self.id,
            "account_id": self.account_id,
            "symbol": self.symbol,
            "side": str(self.side),
            "kind": str(self.kind),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class OrderResult:
    """Outcome of a successful fill."""

    order_id: int | None
    success: bool
    price: Money
    cost: Money
    timestamp: datetime
    confirmation: str = ""

    def log_context(self) -> dict:
        return {
            "order_id": self.order_id,
            "success": self.success,
            "price": str(self.price),
            "cost": str(self.cost),
        }
