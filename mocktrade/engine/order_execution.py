"""
Order execution.

Evaluates one OPEN order against one quote and, when it fills, applies the
cash movement, the holding change and the status change as a single
transaction.
"""

import threading
from collections import defaultdict
from collections.abc import Callable
from datetime import UTC, datetime

from loguru import logger

from mocktrade.core.enums import OrderSide, OrderStatus
from mocktrade.core.exceptions.trading import (
    AccountError,
    InvalidArgumentError,
    OrderCancelledError,
)
from mocktrade.core.models.order import Order, OrderResult
from mocktrade.core.models.order_helpers import FillCalculator, FillEvaluator, OrderValidator
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money
from mocktrade.core.utils.decorators import log_operation
from mocktrade.infrastructure.persistence import (
    AccountRepository,
    Database,
    InvestmentRepository,
    OrderRepository,
)


class OrderExecutor:
    """Fills orders against quotes.

    Thread Safety:
        Fills that touch the same account are serialized through a per-account
        lock, so concurrent passes never lose an update to available funds.
    """

    def __init__(
        self, database: Database, clock: Callable[[], datetime] | None = None
    ) -> None:
        self.database = database
        self._clock = clock or (lambda: datetime.now(UTC))
        self._account_locks: defaultdict[int, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _account_lock(self, account_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._account_locks[account_id]

    @log_operation
    def attempt_execute(self, order: Order, quote: Quote) -> OrderResult:
        """Try to fill ``order`` at ``quote``.

        Returns:
            The fill result; the order is FILLED

        Raises:
            InvalidArgumentError: Symbol mismatch (order untouched), or a stored
                order with a non-positive quantity (order moved to ERROR)
            OrderCancelledError: The order is no longer OPEN
            ExecutionDeferredError: Stale quote or unmet price condition;
                the order stays OPEN
            AccountError: Missing account, insufficient funds or shares;
                the order moved to ERROR
            PersistenceFailureError: The fill transaction failed and was
                rolled back; the order stays OPEN
        """
        OrderValidator.validate_order_for_quote(order, quote)
        if not order.is_open:
            raise OrderCancelledError(order.id, str(order.status))

        if not OrderValidator.has_valid_quantity(order):
            message = f"Invalid quantity {order.quantity}"
            self._mark_error(order, message)
            raise InvalidArgumentError(f"Order {order.id}: {message}")

        price = FillEvaluator.fill_price(order, quote)

        with self._account_lock(order.account_id):
            try:
                return self._fill(order, quote, price)
            except AccountError as e:
                self._mark_error(order, str(e))
                raise

    def _fill(self, order: Order, quote: Quote, price: Money) -> OrderResult:
        timestamp = self._clock()

        with self.database.transaction() as session:
            accounts = AccountRepository(session)
            investments = InvestmentRepository(session)
            orders = OrderRepository(session)

            stored = orders.get(order.id)
            if stored is None or not stored.is_open:
                status = stored.status if stored is not None else "missing"
                raise OrderCancelledError(order.id, str(status))

            account = accounts.get(order.account_id)
            if account is None:
                raise AccountError(f"Account {order.account_id} does not exist")

            investment = investments.get_by_symbol(account.id, order.symbol)

            if order.side == OrderSide.BUY:
                trade_value, investment = FillCalculator.apply_buy(
                    account, investment, order, price, quote, timestamp
                )
                investments.save(investment)
            else:
                existing_id = investment.id if investment is not None else None
                trade_value, investment = FillCalculator.apply_sell(
                    account, investment, order, price, quote
                )
                if investment is None:
                    investments.delete(existing_id)
                else:
                    investments.save(investment)

            accounts.save(account)
            stored.mark_filled(price, timestamp)
            orders.save_status(stored)

        order.status = stored.status
        order.filled_price = stored.filled_price
        order.filled_at = stored.filled_at

        confirmation = (
            f"{order.side.value.title()} {order.quantity} {order.symbol} at {price} "
            f"for {trade_value}"
        )
        logger.info(f"Order {order.id} filled: {confirmation}")
        return OrderResult(
            order_id=order.id,
            success=True,
            price=price,
            cost=trade_value,
            timestamp=timestamp,
            confirmation=confirmation,
        )

    def _mark_error(self, order: Order, message: str) -> None:
        """Move the order to ERROR in its own transaction."""
        with self.database.transaction() as session:
            orders = OrderRepository(session)
            stored = orders.get(order.id)
            if stored is None or not stored.is_open:
                return
            stored.transition_to(OrderStatus.ERROR, message)
            orders.save_status(stored)

        order.status = OrderStatus.ERROR
        order.message = message
        logger.warning(f"Order {order.id} moved to ERROR: {message}")
