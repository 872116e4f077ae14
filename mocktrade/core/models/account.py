"""
Account domain model.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from mocktrade.core.enums import Strategy
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.performance import PerformanceItem
from mocktrade.core.types.financial import ZERO, Money, sum_money


@dataclass
class Account:
    """A simulated brokerage account.

    The account exclusively owns its cash balance. Investments and snapshots
    reference it by id only.
    """

    name: str
    description: str = ""
    initial_balance: Money = ZERO
    available_funds: Money | None = None
    strategy: Strategy = Strategy.NONE
    exclude_from_totals: bool = False
    id: int | None = None

    def __post_init__(self) -> None:
        # A new account starts with its whole initial balance available
        if self.available_funds is None:
            self.available_funds = self.initial_balance

    def aggregate(self, other: "Account") -> "Account":
        """Return a rollup account whose balances are the field-wise sums."""
        return Account(
            name="All Accounts",
            initial_balance=self.initial_balance + other.initial_balance,
            available_funds=self.available_funds + other.available_funds,
        )

    def debit(self, amount: Money) -> None:
        self.available_funds = self.available_funds - amount

    def credit(self, amount: Money) -> None:
        self.available_funds = self.available_funds + amount

    def performance_item(
        self, investments: Iterable[Investment] | None, timestamp: datetime
    ) -> PerformanceItem:
        """Compute this account's snapshot figures.

        Today's change only counts investments whose price is current, so a
        stale previous-session quote does not show up as a move today.
        """
        investments = list(investments or [])
        value = self.available_funds + sum_money(i.value for i in investments)
        today_change = sum_money(i.today_change() for i in investments if i.price_is_current)
        cost_basis = self.available_funds + sum_money(i.cost_basis for i in investments)

        return PerformanceItem(
            account_id=self.id,
            timestamp=timestamp,
            initial_balance=self.initial_balance,
            value=value,
            today_change=today_change,
            cost_basis=cost_basis,
        )

    def log_context(self) -> dict:
        return {"account_id": self.id, "name": self.name}


def aggregate_accounts(accounts: Iterable[Account]) -> Account:
    """Roll up every account not flagged exclude-from-totals."""
    total = Account(name="All Accounts")
    for account in accounts:
        if not account.exclude_from_totals:
            total = total.aggregate(account)
    return total
