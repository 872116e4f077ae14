"""
Persistence layer.

SQLAlchemy tables, the transaction boundary and session-scoped repositories.
"""

from .database import Database
from .order_store import SqlOrderStore
from .repositories import (
    AccountRepository,
    InvestmentRepository,
    OrderRepository,
    SnapshotRepository,
)

__all__ = [
    "Database",
    "SqlOrderStore",
    "AccountRepository",
    "InvestmentRepository",
    "OrderRepository",
    "SnapshotRepository",
]
