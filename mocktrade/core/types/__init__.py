"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    MICRO_CENTS_PER_CENT,
    MICRO_CENTS_PER_DOLLAR,
    PERCENTAGE_DECIMALS,
    ZERO,
    Money,
    calculate_change_percent,
    calculate_trade_value,
    sum_money,
    to_money,
)

__all__ = [
    # Types
    "Money",
    # Utility functions
    "to_money",
    "calculate_trade_value",
    "calculate_change_percent",
    "sum_money",
    # Constants
    "MICRO_CENTS_PER_CENT",
    "MICRO_CENTS_PER_DOLLAR",
    "PERCENTAGE_DECIMALS",
    "ZERO",
]
