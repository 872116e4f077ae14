"""
SQL-backed order store.
"""

from loguru import logger

from mocktrade.core.enums import OrderStatus
from mocktrade.core.exceptions.trading import InvalidArgumentError
from mocktrade.core.interfaces.orders import IOrderStore
from mocktrade.core.models.order import Order

from .database import Database
from .repositories import OrderRepository


class SqlOrderStore(IOrderStore):
    """Order store where every call is its own transaction."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def create_order(self, order: Order) -> Order:
        if not order.is_open:
            raise InvalidArgumentError(f"Only OPEN orders can be created, got {order.status}")
        with self.database.transaction() as session:
            created = OrderRepository(session).add(order)
        logger.info(
            f"Order {created.id} created: {created.side} {created.quantity} "
            f"{created.symbol} ({created.kind})"
        )
        return created

    def get_open_orders(self) -> list[Order]:
        with self.database.transaction() as session:
            return OrderRepository(session).open_orders()

    def get_order(self, order_id: int) -> Order | None:
        with self.database.transaction() as session:
            return OrderRepository(session).get(order_id)

    def get_orders_for_account(self, account_id: int) -> list[Order]:
        with self.database.transaction() as session:
            return OrderRepository(session).for_account(account_id)

    def update_order_status(
        self, order: Order, status: OrderStatus, message: str | None = None
    ) -> Order:
        """Move an order to a terminal status.

        The stored row is re-read so a status set by a concurrent pass is
        never overwritten.

        Raises:
            InvalidArgumentError: If the order is unknown or no longer OPEN
        """
        with self.database.transaction() as session:
            repository = OrderRepository(session)
            stored = repository.get(order.id)
            if stored is None:
                raise InvalidArgumentError(f"Order {order.id} does not exist")
            stored.transition_to(status, message)
            repository.save_status(stored)

        logger.info(f"Order {stored.id} moved to {status}" + (f": {message}" if message else ""))
        return stored

    def cancel_order(self, order_id: int, reason: str = "cancelled by user") -> Order:
        order = self.get_order(order_id)
        if order is None:
            raise InvalidArgumentError(f"Order {order_id} does not exist")
        return self.update_order_status(order, OrderStatus.CANCELLED, reason)
