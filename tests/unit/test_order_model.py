"""
Unit tests for the Order domain model.
"""

from datetime import UTC, datetime

import pytest

from mocktrade.core.enums import OrderKind, OrderSide, OrderStatus
from mocktrade.core.exceptions.trading import InvalidArgumentError
from mocktrade.core.models.order import Order, OrderResult
from mocktrade.core.types.financial import Money


def market_buy(quantity: int = 10) -> Order:
    return Order.create(1, "acme", OrderSide.BUY, OrderKind.MARKET, quantity)


class TestOrderCreation:
    """Test Order.create validation."""

    def test_should_create_open_market_order(self) -> None:
        # Act
        order = market_buy()

        # Assert
        assert order.symbol == "ACME"
        assert order.status == OrderStatus.OPEN
        assert order.is_open
        assert order.trigger_price is None
        assert order.created_at.tzinfo is not None

    def test_should_require_trigger_price_for_limit(self) -> None:
        with pytest.raises(InvalidArgumentError, match="requires a trigger price"):
            Order.create(1, "ACME", OrderSide.BUY, OrderKind.LIMIT, 10)

    def test_should_reject_trigger_price_on_market(self) -> None:
        with pytest.raises(InvalidArgumentError, match="do not take a trigger price"):
            Order.create(1, "ACME", OrderSide.BUY, OrderKind.MARKET, 10, Money.from_dollars("5"))

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_should_reject_non_positive_quantity(self, quantity: int) -> None:
        with pytest.raises(InvalidArgumentError):
            market_buy(quantity)

    def test_should_accept_string_enum_values(self) -> None:
        order = Order.create(1, "ACME", "sell", "stop", 5, Money.from_dollars("40"))
        assert order.side == OrderSide.SELL
        assert order.kind == OrderKind.STOP


class TestOrderLifecycle:
    """Test status transitions and immutability."""

    def test_should_not_allow_terms_to_change(self) -> None:
        order = market_buy()
        with pytest.raises(AttributeError):
            order.quantity = 20
        with pytest.raises(AttributeError):
            order.symbol = "OTHER"

    def test_should_fill_exactly_once(self) -> None:
        # Arrange
        order = market_buy()
        filled_at = datetime(2024, 1, 3, 15, 0, tzinfo=UTC)

        # Act
        order.mark_filled(Money.from_dollars("50"), filled_at)

        # Assert
        assert order.status == OrderStatus.FILLED
        assert order.filled_price == Money.from_dollars("50")
        assert order.filled_at == filled_at
        with pytest.raises(InvalidArgumentError, match="already filled"):
            order.transition_to(OrderStatus.CANCELLED)

    def test_should_never_return_to_open(self) -> None:
        order = market_buy()
        with pytest.raises(InvalidArgumentError):
            order.transition_to(OrderStatus.OPEN)

    def test_should_record_message_on_error(self) -> None:
        order = market_buy()
        order.transition_to(OrderStatus.ERROR, "insufficient funds")
        assert order.status == OrderStatus.ERROR
        assert order.message == "insufficient funds"


class TestOrderResult:
    def test_should_expose_log_context(self) -> None:
        result = OrderResult(
            order_id=1,
            success=True,
            price=Money.from_dollars("50"),
            cost=Money.from_dollars("500"),
            timestamp=datetime(2024, 1, 3, tzinfo=UTC),
        )
        assert result.log_context() == {
            "order_id": 1,
            "success": True,
            "price": "$50.00",
            "cost": "$500.00",
        }
