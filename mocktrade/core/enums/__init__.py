"""
Core enumerations for the trading simulator.

This module provides centralized enumerations for domain concepts
like order sides, order kinds, order statuses and account strategies.
"""

from .order_types import OrderKind, OrderSide, OrderStatus
from .states import EditState, SchedulerState
from .strategies import Strategy

__all__ = ["OrderSide", "OrderKind", "OrderStatus", "Strategy", "SchedulerState", "EditState"]
