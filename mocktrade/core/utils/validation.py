"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from typing import Any

from mocktrade.core.constants import MAX_ORDER_QUANTITY, MIN_ORDER_QUANTITY
from mocktrade.core.exceptions.trading import InvalidArgumentError
from mocktrade.core.types.financial import Money


def validate_symbol(symbol: Any, param_name: str = "symbol") -> str:
    """Validate and normalize a ticker symbol.

    Args:
        symbol: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The upper-cased, stripped symbol

    Raises:
        InvalidArgumentError: If symbol is not a non-empty string
    """
    if not isinstance(symbol, str):
        raise InvalidArgumentError(f"{param_name} must be str, got {type(symbol).__name__}")
    normalized = symbol.strip().upper()
    if not normalized:
        raise InvalidArgumentError(f"{param_name} must not be empty")
    return normalized


def validate_quantity(quantity: Any, param_name: str = "quantity") -> int:
    """Validate a whole-share order quantity.

    Raises:
        InvalidArgumentError: If quantity is not an int within order limits
    """
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise InvalidArgumentError(f"{param_name} must be int, got {type(quantity).__name__}")
    if quantity < MIN_ORDER_QUANTITY:
        raise InvalidArgumentError(f"{param_name} must be positive, got {quantity}")
    if quantity > MAX_ORDER_QUANTITY:
        raise InvalidArgumentError(
            f"{param_name} too large: {quantity} > {MAX_ORDER_QUANTITY}"
        )
    return quantity


def validate_price(price: Any, param_name: str = "price") -> Money:
    """Validate that a price is a positive Money value.

    Raises:
        InvalidArgumentError: If price is not Money or not positive
    """
    if not isinstance(price, Money):
        raise InvalidArgumentError(f"{param_name} must be Money, got {type(price).__name__}")
    if price.micro_cents <= 0:
        raise InvalidArgumentError(f"{param_name} must be positive, got {price}")
    return price


def validate_days(days: Any, param_name: str = "days") -> int:
    """Validate a day-count window.

    Raises:
        InvalidArgumentError: If days is not a non-negative int
    """
    if not isinstance(days, int) or isinstance(days, bool) or days < 0:
        raise InvalidArgumentError(f"{param_name} must be a non-negative int, got {days!r}")
    return days
