"""
Custom exception hierarchy for the trading simulator.

This module defines domain-specific exceptions for better error handling.
"""

from mocktrade.core.types.financial import Money


class MockTradeException(Exception):
    """Base exception for all trading simulator errors."""

    pass


class ValidationError(MockTradeException):
    """Raised when input validation fails."""

    pass


class InvalidArgumentError(ValidationError):
    """Raised when an operation is called with arguments it cannot accept.

    The order involved is left untouched.
    """

    pass


class ConfigurationError(MockTradeException):
    """Raised when configuration is invalid."""

    pass


class ExecutionDeferredError(MockTradeException):
    """Raised when an order cannot fill yet and stays OPEN for the next pass."""

    def __init__(self, order_id: int | None, reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Order {order_id} deferred: {reason}")


class QuoteUnavailableError(ExecutionDeferredError):
    """Raised when no usable quote could be retrieved for a symbol."""

    def __init__(self, symbol: str, order_id: int | None = None):
        self.symbol = symbol
        super().__init__(order_id, f"no quote available for {symbol}")


class AccountError(MockTradeException):
    """Raised when an account cannot support the requested operation.

    Orders failing with this error move to the ERROR state.
    """

    pass


class InsufficientFundsError(AccountError):
    """Raised when there are insufficient funds for an operation."""

    def __init__(self, required: Money, available: Money, operation: str = "operation"):
        self.required = required
        self.available = available
        self.operation = operation
        super().__init__(
            f"Insufficient funds for {operation}: required={required}, available={available}"
        )


class OrderCancelledError(MockTradeException):
    """Raised when an order is no longer OPEN and cannot be executed."""

    def __init__(self, order_id: int | None, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order {order_id} is {status} and cannot be executed")


class PersistenceFailureError(MockTradeException):
    """Raised when a storage transaction fails and has been rolled back."""

    pass
