"""
PerformanceItem domain model: one point-in-time snapshot of an account.
"""

from dataclasses import dataclass
from datetime import datetime

from mocktrade.core.types.financial import Money


@dataclass
class PerformanceItem:
    """Snapshot of an account's balances at a timestamp."""

    account_id: int | None
    timestamp: datetime
    initial_balance: Money
    value: Money
    today_change: Money
    cost_basis: Money
    id: int | None = None

    def differs_from(self, other: "PerformanceItem") -> bool:
        """Check whether any recomputable figure changed."""
        return (
            self.cost_basis != other.cost_basis
            or self.today_change != other.today_change
            or self.value != other.value
        )

    def copy_figures_from(self, other: "PerformanceItem") -> None:
        self.cost_basis = other.cost_basis
        self.today_change = other.today_change
        self.value = other.value

    def aggregate(self, other: "PerformanceItem") -> "PerformanceItem":
        """Combine two snapshots of the same timestamp into a rollup item."""
        return PerformanceItem(
            account_id=None,
            timestamp=max(self.timestamp, other.timestamp),
            initial_balance=self.initial_balance + other.initial_balance,
            value=self.value + other.value,
            today_change=self.today_change + other.today_change,
            cost_basis=self.cost_basis + other.cost_basis,
        )

    def to_dict(self) -> dict:
        """Convert to a dictionary of dollar floats for display and charting."""
        return {
            "account_id": self.account_id,
            "timestamp": self.timestamp,
            "initial_balance": self.initial_balance.to_float(),
            "value": self.value.to_float(),
            "today_change": self.today_change.to_float(),
            "cost_basis": self.cost_basis.to_float(),
        }
