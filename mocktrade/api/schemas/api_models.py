"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from mocktrade.core.enums import OrderKind, OrderSide, OrderStatus
from mocktrade.core.models.order import Order, OrderResult
from mocktrade.core.models.performance import PerformanceItem


class OrderResponse(BaseModel):
    """Response model for a stored order."""

    id: int
    account_id: int
    symbol: str
    side: OrderSide
    kind: OrderKind
    quantity: int
    trigger_price: float | None = None
    status: OrderStatus
    created_at: datetime
    message: str | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            account_id=order.account_id,
            symbol=order.symbol,
            side=order.side,
            kind=order.kind,
            quantity=order.quantity,
            trigger_price=order.trigger_price.to_float() if order.trigger_price is not None else None,
            status=order.status,
            created_at=order.created_at,
            message=order.message,
        )


class FillResponse(BaseModel):
    """Response model for a filled order."""

    order_id: int
    price: float
    cost: float
    timestamp: datetime
    confirmation: str

    @classmethod
    def from_result(cls, result: OrderResult) -> "FillResponse":
        return cls(
            order_id=result.order_id,
            price=result.price.to_float(),
            cost=result.cost.to_float(),
            timestamp=result.timestamp,
            confirmation=result.confirmation,
        )


class ExecutionResponse(BaseModel):
    """Response model for a forced execution pass."""

    skipped: bool = Field(default=False, description="Another pass was already running")
    fills: list[FillResponse] = Field(default_factory=list)
    deferred: int = 0
    errors: int = 0
    signals: int = 0
    snapshots_written: int = 0


class SnapshotResponse(BaseModel):
    """Response model for one performance snapshot, in dollars."""

    account_id: int | None = Field(default=None, description="None for an all-accounts rollup")
    timestamp: datetime
    initial_balance: float
    value: float
    today_change: float
    cost_basis: float

    @classmethod
    def from_item(cls, item: PerformanceItem) -> "SnapshotResponse":
        return cls(**item.to_dict())


class PurgeResponse(BaseModel):
    """Response model for a snapshot purge."""

    older_than_days: int
    removed: int
