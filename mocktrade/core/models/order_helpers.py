"""Helper classes for order execution to keep the executor small."""

from datetime import datetime

from mocktrade.core.enums import OrderKind, OrderSide
from mocktrade.core.exceptions.trading import (
    AccountError,
    ExecutionDeferredError,
    InsufficientFundsError,
    InvalidArgumentError,
)
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money, calculate_trade_value


class OrderValidator:
    """Validates an order against a quote before any price logic runs."""

    @staticmethod
    def validate_order_for_quote(order: Order, quote: Quote) -> None:
        """Check the preconditions that never depend on account state.

        Raises:
            InvalidArgumentError: If the quote is for a different symbol
        """
        if quote is None:
            raise InvalidArgumentError(f"Order {order.id} has no quote")
        if order.symbol != quote.symbol:
            raise InvalidArgumentError(
                f"Order {order.id} symbol {order.symbol} does not match quote symbol {quote.symbol}"
            )

    @staticmethod
    def has_valid_quantity(order: Order) -> bool:
        return isinstance(order.quantity, int) and order.quantity > 0


class FillEvaluator:
    """Decides whether, and at what price, an order fills against a quote."""

    @staticmethod
    def limit_condition_met(side: OrderSide, price: Money, trigger: Money) -> bool:
        """Limit buys fill at or below the trigger, limit sells at or above."""
        if side.is_buy:
            return price <= trigger
        return price >= trigger

    @staticmethod
    def stop_condition_met(side: OrderSide, price: Money, trigger: Money) -> bool:
        """Stops trigger when the price moves through the trigger adversely.

        A sell stop protects a holding against a fall, a buy stop against a
        rise.
        """
        if side.is_sell:
            return price <= trigger
        return price >= trigger

    @classmethod
    def fill_price(cls, order: Order, quote: Quote) -> Money:
        """Return the price the order fills at.

        Raises:
            ExecutionDeferredError: If the quote is stale or the price
                condition is not met
        """
        if not quote.price_is_current:
            raise ExecutionDeferredError(order.id, f"quote for {quote.symbol} is not current")

        if order.kind == OrderKind.MARKET:
            return quote.price

        if order.kind == OrderKind.LIMIT:
            if cls.limit_condition_met(order.side, quote.price, order.trigger_price):
                return quote.price
            raise ExecutionDeferredError(
                order.id, f"limit {order.trigger_price} not reached (price {quote.price})"
            )

        if order.kind == OrderKind.STOP:
            if cls.stop_condition_met(order.side, quote.price, order.trigger_price):
                return quote.price
            raise ExecutionDeferredError(
                order.id, f"stop {order.trigger_price} not triggered (price {quote.price})"
            )

        raise InvalidArgumentError(f"Unsupported order kind: {order.kind}")


class FillCalculator:
    """Applies a fill to an account and its holding.

    Works on domain objects only; the caller persists the results inside a
    single transaction.
    """

    @staticmethod
    def apply_buy(
        account: Account,
        investment: Investment | None,
        order: Order,
        price: Money,
        quote: Quote,
        timestamp: datetime,
    ) -> tuple[Money, Investment]:
        """Debit the account and grow the holding at a weighted-average cost.

        Returns:
            Trade value and the new or updated investment

        Raises:
            InsufficientFundsError: If the account cannot pay for the trade
        """
        trade_value = calculate_trade_value(price, order.quantity)
        if trade_value > account.available_funds:
            raise InsufficientFundsError(
                required=trade_value,
                available=account.available_funds,
                operation=f"buying {order.quantity} {order.symbol} at {price}",
            )

        account.debit(trade_value)

        if investment is None:
            investment = Investment.open(
                account_id=account.id,
                symbol=order.symbol,
                quantity=order.quantity,
                price=price,
                timestamp=timestamp,
                previous_close=quote.previous_close,
            )
        else:
            investment.quantity += order.quantity
            investment.cost_basis = investment.cost_basis + trade_value
            investment.apply_quote(quote)

        return trade_value, investment

    @staticmethod
    def apply_sell(
        account: Account,
        investment: Investment | None,
        order: Order,
        price: Money,
        quote: Quote,
    ) -> tuple[Money, Investment | None]:
        """Credit the account and shrink the holding, realizing cost pro-rata.

        Returns:
            Trade value and the updated investment, or None when the holding
            was sold out

        Raises:
            AccountError: If the account does not hold enough shares
        """
        held = investment.quantity if investment is not None else 0
        if order.quantity > held:
            raise AccountError(
                f"Insufficient shares for selling {order.quantity} {order.symbol}: held={held}"
            )

        trade_value = calculate_trade_value(price, order.quantity)
        account.credit(trade_value)

        if order.quantity == investment.quantity:
            return trade_value, None

        remaining = investment.quantity - order.quantity
        investment.cost_basis = investment.cost_basis.pro_rata(remaining, investment.quantity)
        investment.quantity = remaining
        investment.apply_quote(quote)
        return trade_value, investment
