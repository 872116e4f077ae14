"""
SQLAlchemy ORM tables for accounts, investments, orders and snapshots.

Rows are storage shapes only; each converts to and from its domain model.
Money columns hold integer micro-cents and timestamps are stored as naive
UTC, re-attached to UTC when read.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from mocktrade.core.enums import OrderKind, OrderSide, OrderStatus, Strategy
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order
from mocktrade.core.models.performance import PerformanceItem
from mocktrade.core.types.financial import Money


class MoneyType(TypeDecorator):
    """Money stored as a BIGINT of micro-cents."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Money | None, dialect) -> int | None:
        if value is None:
            return None
        return value.micro_cents

    def process_result_value(self, value: int | None, dialect) -> Money | None:
        if value is None:
            return None
        return Money(int(value))


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as naive UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


class Base(DeclarativeBase):
    """Base class for all ORM tables."""

    pass


class AccountRow(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(String(256), default="", nullable=False)
    initial_balance: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    available_funds: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    strategy: Mapped[str] = mapped_column(String(32), default=Strategy.NONE.value, nullable=False)
    exclude_from_totals: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def to_domain(self) -> Account:
        return Account(
            id=self.id,
            name=self.name,
            description=self.description,
            initial_balance=self.initial_balance,
            available_funds=self.available_funds,
            strategy=Strategy(self.strategy),
            exclude_from_totals=self.exclude_from_totals,
        )

    def update_from(self, account: Account) -> None:
        self.name = account.name
        self.description = account.description
        self.initial_balance = account.initial_balance
        self.available_funds = account.available_funds
        self.strategy = account.strategy.value
        self.exclude_from_totals = account.exclude_from_totals

    @classmethod
    def from_domain(cls, account: Account) -> "AccountRow":
        row = cls(id=account.id)
        row.update_from(account)
        return row


class InvestmentRow(Base):
    __tablename__ = "investments"
    __table_args__ = (Index("ix_investments_account_symbol", "account_id", "symbol", unique=True),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    symbol: Mapped[str] = mapped_column(String(16), nullable=False)
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)
    cost_basis: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    price: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    prev_day_close: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    last_trade_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    price_is_current: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def to_domain(self) -> Investment:
        return Investment(
            id=self.id,
            account_id=self.account_id,
            symbol=self.symbol,
            quantity=self.quantity,
            cost_basis=self.cost_basis,
            price=self.price,
            prev_day_close=self.prev_day_close,
            last_trade_time=self.last_trade_time,
            price_is_current=self.price_is_current,
        )

    def update_from(self, investment: Investment) -> None:
        self.account_id = investment.account_id
        self.symbol = investment.symbol
        self.quantity = investment.quantity
        self.cost_basis = investment.cost_basis
        self.price = investment.price
        self.prev_day_close = investment.prev_day_close
        self.last_trade_time = investment.last_trade_time
        self.price_is_current = investment.price_is_current

    @classmethod
    def from_domain(cls, investment: Investment) -> "InvestmentRow":
        row = cls(id=investment.id)
        row.update_from(investment)
        return row


class OrderRow(Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_status_created", "status", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    symbol: Mapped[str] = mapped_column(String(16), nullable=False)
    side: Mapped[str] = mapped_column(String(8), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)
    trigger_price: Mapped[Money | None] = mapped_column(MoneyType, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    message: Mapped[str | None] = mapped_column(String(512), nullable=True)
    filled_price: Mapped[Money | None] = mapped_column(MoneyType, nullable=True)
    filled_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    def to_domain(self) -> Order:
        return Order(
            id=self.id,
            account_id=self.account_id,
            symbol=self.symbol,
            side=OrderSide(self.side),
            kind=OrderKind(self.kind),
            quantity=self.quantity,
            trigger_price=self.trigger_price,
            status=OrderStatus(self.status),
            created_at=self.created_at,
            message=self.message,
            filled_price=self.filled_price,
            filled_at=self.filled_at,
        )

    def update_status_from(self, order: Order) -> None:
        """Copy the mutable part of an order (its lifecycle fields)."""
        self.status = order.status.value
        self.message = order.message
        self.filled_price = order.filled_price
        self.filled_at = order.filled_at

    @classmethod
    def from_domain(cls, order: Order) -> "OrderRow":
        row = cls(
            id=order.id,
            account_id=order.account_id,
            symbol=order.symbol,
            side=order.side.value,
            kind=order.kind.value,
            quantity=order.quantity,
            trigger_price=order.trigger_price,
            created_at=order.created_at,
        )
        row.update_status_from(order)
        return row


class SnapshotRow(Base):
    __tablename__ = "snapshot_totals"
    __table_args__ = (Index("ix_snapshot_account_timestamp", "account_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    initial_balance: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    value: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    today_change: Mapped[Money] = mapped_column(MoneyType, nullable=False)
    cost_basis: Mapped[Money] = mapped_column(MoneyType, nullable=False)

    def to_domain(self) -> PerformanceItem:
        return PerformanceItem(
            id=self.id,
            account_id=self.account_id,
            timestamp=self.timestamp,
            initial_balance=self.initial_balance,
            value=self.value,
            today_change=self.today_change,
            cost_basis=self.cost_basis,
        )

    def update_from(self, item: PerformanceItem) -> None:
        self.account_id = item.account_id
        self.timestamp = item.timestamp
        self.initial_balance = item.initial_balance
        self.value = item.value
        self.today_change = item.today_change
        self.cost_basis = item.cost_basis

    @classmethod
    def from_domain(cls, item: PerformanceItem) -> "SnapshotRow":
        row = cls(id=item.id)
        row.update_from(item)
        return row
