"""
Order store interface.
"""

from abc import ABC, abstractmethod

from mocktrade.core.enums import OrderStatus
from mocktrade.core.models.order import Order


class IOrderStore(ABC):
    """Abstract interface for pending and historical orders."""

    @abstractmethod
    def create_order(self, order: Order) -> Order:
        """Persist a new OPEN order and return it with its id."""
        pass

    @abstractmethod
    def get_open_orders(self) -> list[Order]:
        """Get OPEN orders, oldest first."""
        pass

    @abstractmethod
    def update_order_status(self, order: Order, status: OrderStatus, message: str | None = None) -> Order:
        """Move an OPEN order to a terminal status."""
        pass

    @abstractmethod
    def get_order(self, order_id: int) -> Order | None:
        """Get an order by id."""
        pass
