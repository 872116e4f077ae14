"""
Unit tests for OrderExecutor against an in-memory database.
"""

import threading
from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError

from mocktrade.core.enums import OrderKind, OrderSide, OrderStatus
from mocktrade.core.exceptions.trading import (
    AccountError,
    ExecutionDeferredError,
    InsufficientFundsError,
    InvalidArgumentError,
    OrderCancelledError,
    PersistenceFailureError,
)
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money
from mocktrade.engine.order_execution import OrderExecutor
from mocktrade.infrastructure.persistence import (
    AccountRepository,
    InvestmentRepository,
    OrderRepository,
    SqlOrderStore,
)

NOW = datetime(2024, 1, 3, 15, 0, tzinfo=UTC)


def usd(amount: str) -> Money:
    return Money.from_dollars(amount)


def quote(price: str, symbol: str = "ACME", current: bool = True) -> Quote:
    return Quote(symbol, usd(price), usd(price), NOW, price_is_current=current)


class TestOrderExecutor:
    """Test fills, deferrals and error transitions."""

    @pytest.fixture
    def executor(self, database, clock) -> OrderExecutor:
        return OrderExecutor(database, clock)

    @pytest.fixture
    def store(self, database) -> SqlOrderStore:
        return SqlOrderStore(database)

    @pytest.fixture
    def account(self, database) -> Account:
        with database.transaction() as session:
            return AccountRepository(session).add(Account(name="Test", initial_balance=usd("10000")))

    def place(self, store, account_id, side=OrderSide.BUY, quantity=10, kind=OrderKind.MARKET, trigger=None):
        return store.create_order(
            Order.create(account_id, "ACME", side, kind, quantity, usd(trigger) if trigger else None)
        )

    def funds(self, database, account_id) -> Money:
        with database.transaction() as session:
            return AccountRepository(session).get(account_id).available_funds

    def holding(self, database, account_id) -> Investment | None:
        with database.transaction() as session:
            return InvestmentRepository(session).get_by_symbol(account_id, "ACME")

    def test_should_fill_market_buy_atomically(self, executor, store, account, database) -> None:
        # Arrange
        order = self.place(store, account.id)

        # Act
        result = executor.attempt_execute(order, quote("50"))

        # Assert
        assert result.success is True
        assert result.price == usd("50")
        assert result.cost == usd("500")
        assert result.timestamp == NOW
        assert "Buy 10 ACME at $50.00" in result.confirmation
        assert self.funds(database, account.id) == usd("9500")
        investment = self.holding(database, account.id)
        assert investment.quantity == 10
        assert investment.cost_basis == usd("500")
        stored = store.get_order(order.id)
        assert stored.status == OrderStatus.FILLED
        assert stored.filled_price == usd("50")
        assert order.status == OrderStatus.FILLED

    def test_should_leave_order_open_on_stale_quote(self, executor, store, account, database) -> None:
        # Arrange
        order = self.place(store, account.id)

        # Act & Assert
        with pytest.raises(ExecutionDeferredError):
            executor.attempt_execute(order, quote("50", current=False))

        assert store.get_order(order.id).status == OrderStatus.OPEN
        assert self.funds(database, account.id) == usd("10000")
        assert self.holding(database, account.id) is None

    def test_should_defer_limit_buy_above_trigger(self, executor, store, account) -> None:
        order = self.place(store, account.id, kind=OrderKind.LIMIT, trigger="45")

        with pytest.raises(ExecutionDeferredError):
            executor.attempt_execute(order, quote("50"))

        assert store.get_order(order.id).status == OrderStatus.OPEN

    def test_should_mark_error_on_insufficient_funds(self, executor, store, account, database) -> None:
        # Arrange
        order = self.place(store, account.id, quantity=300)

        # Act & Assert
        with pytest.raises(InsufficientFundsError):
            executor.attempt_execute(order, quote("50"))

        stored = store.get_order(order.id)
        assert stored.status == OrderStatus.ERROR
        assert "Insufficient funds" in stored.message
        assert self.funds(database, account.id) == usd("10000")
        assert self.holding(database, account.id) is None

    def test_should_mark_error_for_missing_account(self, executor, store) -> None:
        order = self.place(store, account_id=999)

        with pytest.raises(AccountError, match="does not exist"):
            executor.attempt_execute(order, quote("50"))

        assert store.get_order(order.id).status == OrderStatus.ERROR

    def test_should_mark_error_for_stored_non_positive_quantity(self, executor, account, database, store) -> None:
        # Arrange
        with database.transaction() as session:
            order = OrderRepository(session).add(
                Order(account_id=account.id, symbol="ACME", side=OrderSide.BUY, kind=OrderKind.MARKET, quantity=0)
            )

        # Act & Assert
        with pytest.raises(InvalidArgumentError, match="Invalid quantity"):
            executor.attempt_execute(order, quote("50"))

        assert store.get_order(order.id).status == OrderStatus.ERROR

    def test_should_reject_symbol_mismatch_without_touching_order(self, executor, store, account) -> None:
        order = self.place(store, account.id)

        with pytest.raises(InvalidArgumentError):
            executor.attempt_execute(order, quote("50", symbol="OTHER"))

        assert store.get_order(order.id).status == OrderStatus.OPEN

    def test_should_refuse_cancelled_order(self, executor, store, account, database) -> None:
        # Arrange
        order = self.place(store, account.id)
        store.cancel_order(order.id)

        # Act & Assert: the caller's copy still says OPEN
        with pytest.raises(OrderCancelledError):
            executor.attempt_execute(order, quote("50"))

        assert store.get_order(order.id).status == OrderStatus.CANCELLED
        assert self.funds(database, account.id) == usd("10000")

    def test_should_close_holding_on_full_sell(self, executor, store, account, database) -> None:
        # Arrange
        executor.attempt_execute(self.place(store, account.id), quote("50"))
        sell = self.place(store, account.id, side=OrderSide.SELL)

        # Act
        result = executor.attempt_execute(sell, quote("60"))

        # Assert
        assert result.cost == usd("600")
        assert self.funds(database, account.id) == usd("10100")
        assert self.holding(database, account.id) is None

    def test_should_mark_error_when_selling_unheld_shares(self, executor, store, account) -> None:
        sell = self.place(store, account.id, side=OrderSide.SELL)

        with pytest.raises(AccountError, match="Insufficient shares"):
            executor.attempt_execute(sell, quote("60"))

        assert store.get_order(sell.id).status == OrderStatus.ERROR

    def test_should_roll_back_everything_when_commit_fails(
        self, executor, store, account, database, monkeypatch
    ) -> None:
        # Arrange
        order = self.place(store, account.id)

        def failing_save_status(self, order):
            raise OperationalError("UPDATE orders", {}, Exception("disk I/O error"))

        monkeypatch.setattr(OrderRepository, "save_status", failing_save_status)

        # Act & Assert
        with pytest.raises(PersistenceFailureError):
            executor.attempt_execute(order, quote("50"))

        monkeypatch.undo()
        assert store.get_order(order.id).status == OrderStatus.OPEN
        assert self.funds(database, account.id) == usd("10000")
        assert self.holding(database, account.id) is None

    def test_should_serialize_concurrent_fills_on_one_account(self, executor, store, database) -> None:
        # Arrange: funds for exactly one of the two buys
        with database.transaction() as session:
            account = AccountRepository(session).add(Account(name="Tight", initial_balance=usd("600")))
        orders = [self.place(store, account.id), self.place(store, account.id)]
        outcomes: list[str] = []
        barrier = threading.Barrier(2)

        def run(order):
            barrier.wait()
            try:
                executor.attempt_execute(order, quote("50"))
                outcomes.append("filled")
            except InsufficientFundsError:
                outcomes.append("error")

        # Act
        threads = [threading.Thread(target=run, args=(o,)) for o in orders]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        # Assert
        assert sorted(outcomes) == ["error", "filled"]
        assert self.funds(database, account.id) == usd("100")
        statuses = sorted(store.get_order(o.id).status for o in orders)
        assert statuses == [OrderStatus.ERROR, OrderStatus.FILLED]
