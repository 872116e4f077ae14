"""
Session-scoped repositories.

Each repository works inside a session handed out by
``Database.transaction()`` and never commits on its own, so several
repositories can take part in one atomic unit of work.
"""

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from mocktrade.core.enums import OrderStatus
from mocktrade.core.exceptions.trading import PersistenceFailureError
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order
from mocktrade.core.models.performance import PerformanceItem

from .tables import AccountRow, InvestmentRow, OrderRow, SnapshotRow


class AccountRepository:
    """Account rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, account: Account) -> Account:
        row = AccountRow.from_domain(account)
        self.session.add(row)
        self.session.flush()
        account.id = row.id
        return account

    def get(self, account_id: int) -> Account | None:
        row = self.session.get(AccountRow, account_id)
        return row.to_domain() if row is not None else None

    def all(self, include_excluded: bool = True) -> list[Account]:
        stmt = select(AccountRow).order_by(AccountRow.id)
        if not include_excluded:
            stmt = stmt.where(AccountRow.exclude_from_totals.is_(False))
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def save(self, account: Account) -> None:
        row = self.session.get(AccountRow, account.id)
        if row is None:
            raise PersistenceFailureError(f"Account {account.id} no longer exists")
        row.update_from(account)

    def delete(self, account_id: int) -> None:
        self.session.execute(delete(AccountRow).where(AccountRow.id == account_id))


class InvestmentRepository:
    """Investment rows, one per (account, symbol)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def for_account(self, account_id: int) -> list[Investment]:
        stmt = (
            select(InvestmentRow)
            .where(InvestmentRow.account_id == account_id)
            .order_by(InvestmentRow.symbol)
        )
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def all(self) -> list[Investment]:
        stmt = select(InvestmentRow).order_by(InvestmentRow.account_id, InvestmentRow.symbol)
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def get_by_symbol(self, account_id: int, symbol: str) -> Investment | None:
        stmt = select(InvestmentRow).where(
            InvestmentRow.account_id == account_id, InvestmentRow.symbol == symbol
        )
        row = self.session.scalars(stmt).first()
        return row.to_domain() if row is not None else None

    def save(self, investment: Investment) -> Investment:
        """Insert a new holding or update an existing one."""
        if investment.id is None:
            row = InvestmentRow.from_domain(investment)
            self.session.add(row)
            self.session.flush()
            investment.id = row.id
            return investment

        row = self.session.get(InvestmentRow, investment.id)
        if row is None:
            raise PersistenceFailureError(f"Investment {investment.id} no longer exists")
        row.update_from(investment)
        return investment

    def delete(self, investment_id: int) -> None:
        self.session.execute(delete(InvestmentRow).where(InvestmentRow.id == investment_id))

    def delete_for_account(self, account_id: int) -> int:
        result = self.session.execute(
            delete(InvestmentRow).where(InvestmentRow.account_id == account_id)
        )
        return result.rowcount

    def last_trade_time(self) -> datetime | None:
        return self.session.scalar(select(func.max(InvestmentRow.last_trade_time)))


class OrderRepository:
    """Order rows. Orders are never deleted."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, order: Order) -> Order:
        row = OrderRow.from_domain(order)
        self.session.add(row)
        self.session.flush()
        order.id = row.id
        return order

    def get(self, order_id: int) -> Order | None:
        row = self.session.get(OrderRow, order_id)
        return row.to_domain() if row is not None else None

    def open_orders(self) -> list[Order]:
        stmt = (
            select(OrderRow)
            .where(OrderRow.status == OrderStatus.OPEN.value)
            .order_by(OrderRow.created_at, OrderRow.id)
        )
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def for_account(self, account_id: int) -> list[Order]:
        stmt = (
            select(OrderRow)
            .where(OrderRow.account_id == account_id)
            .order_by(OrderRow.created_at, OrderRow.id)
        )
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def count_open_for_account(self, account_id: int) -> int:
        stmt = select(func.count(OrderRow.id)).where(
            OrderRow.account_id == account_id, OrderRow.status == OrderStatus.OPEN.value
        )
        return self.session.scalar(stmt) or 0

    def save_status(self, order: Order) -> None:
        row = self.session.get(OrderRow, order.id)
        if row is None:
            raise PersistenceFailureError(f"Order {order.id} no longer exists")
        row.update_status_from(order)


class SnapshotRepository:
    """Snapshot rows, logically unique per (account, timestamp)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def last_for_account(self, account_id: int) -> PerformanceItem | None:
        stmt = (
            select(SnapshotRow)
            .where(SnapshotRow.account_id == account_id)
            .order_by(SnapshotRow.timestamp.desc(), SnapshotRow.id.desc())
            .limit(1)
        )
        row = self.session.scalars(stmt).first()
        return row.to_domain() if row is not None else None

    def insert(self, item: PerformanceItem) -> PerformanceItem:
        row = SnapshotRow.from_domain(item)
        self.session.add(row)
        self.session.flush()
        item.id = row.id
        return item

    def update(self, item: PerformanceItem) -> None:
        row = self.session.get(SnapshotRow, item.id)
        if row is None:
            raise PersistenceFailureError(f"Snapshot {item.id} no longer exists")
        row.update_from(item)
        self.session.flush()

    def count(self, account_id: int | None = None) -> int:
        stmt = select(func.count(SnapshotRow.id))
        if account_id is not None:
            stmt = stmt.where(SnapshotRow.account_id == account_id)
        return self.session.scalar(stmt) or 0

    def current(self, account_id: int | None = None) -> list[PerformanceItem]:
        """Latest snapshot per account (or for one account)."""
        latest = select(
            SnapshotRow.account_id, func.max(SnapshotRow.timestamp).label("latest")
        ).group_by(SnapshotRow.account_id)
        if account_id is not None:
            latest = latest.where(SnapshotRow.account_id == account_id)
        latest = latest.subquery()

        stmt = (
            select(SnapshotRow)
            .join(
                latest,
                (SnapshotRow.account_id == latest.c.account_id)
                & (SnapshotRow.timestamp == latest.c.latest),
            )
            .order_by(SnapshotRow.account_id, SnapshotRow.id)
        )

        items: dict[int, PerformanceItem] = {}
        for row in self.session.scalars(stmt):
            # Keep the newest row should a duplicate timestamp slip in
            items[row.account_id] = row.to_domain()
        return list(items.values())

    def window(self, since: datetime, account_id: int | None = None) -> list[PerformanceItem]:
        """Snapshots at or after ``since``, oldest first."""
        stmt = select(SnapshotRow).where(SnapshotRow.timestamp >= since)
        if account_id is not None:
            stmt = stmt.where(SnapshotRow.account_id == account_id)
        stmt = stmt.order_by(SnapshotRow.timestamp, SnapshotRow.account_id, SnapshotRow.id)
        return [row.to_domain() for row in self.session.scalars(stmt)]

    def delete_older_than(self, cutoff: datetime) -> int:
        result = self.session.execute(delete(SnapshotRow).where(SnapshotRow.timestamp < cutoff))
        return result.rowcount

    def delete_for_account(self, account_id: int) -> int:
        result = self.session.execute(
            delete(SnapshotRow).where(SnapshotRow.account_id == account_id)
        )
        return result.rowcount
