"""
Account ledger.

Query and bookkeeping surface over accounts, investments and snapshots:
account CRUD, holdings, current and windowed snapshot reads, and the
"all accounts" rollups used for totals and charting.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime, timedelta

import pandas as pd
from loguru import logger

from mocktrade.core.enums import Strategy
from mocktrade.core.exceptions.trading import AccountError, InvalidArgumentError
from mocktrade.core.models.account import Account, aggregate_accounts
from mocktrade.core.models.descriptors import ACCOUNT_FIELDS, validate_fields
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.performance import PerformanceItem
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money, to_money
from mocktrade.core.utils.decorators import log_operation
from mocktrade.core.utils.validation import validate_days
from mocktrade.infrastructure.persistence import (
    AccountRepository,
    Database,
    InvestmentRepository,
    OrderRepository,
    SnapshotRepository,
)

SNAPSHOT_COLUMNS = ["initial_balance", "value", "today_change", "cost_basis"]


class AccountLedger:
    """Accounts, holdings and snapshot reads backed by the database."""

    def __init__(self, database: Database, clock: Callable[[], datetime] | None = None) -> None:
        self.database = database
        self._clock = clock or (lambda: datetime.now(UTC))

    # Accounts
    @log_operation
    def create_account(
        self,
        name: str,
        initial_balance: Money | str | int | float,
        description: str = "",
        strategy: Strategy = Strategy.NONE,
        exclude_from_totals: bool = False,
    ) -> Account:
        """Create an account funded with its initial balance.

        Raises:
            ValidationError: If any field violates its descriptor hints
        """
        account = Account(
            name=name.strip() if isinstance(name, str) else name,
            description=description,
            initial_balance=to_money(initial_balance),
            strategy=Strategy(strategy),
            exclude_from_totals=exclude_from_totals,
        )
        validate_fields(account, ACCOUNT_FIELDS)

        with self.database.transaction() as session:
            AccountRepository(session).add(account)

        logger.info(f"Account created: {account.name} ({account.initial_balance})", extra=account.log_context())
        return account

    def get_account(self, account_id: int) -> Account:
        """Fetch one account.

        Raises:
            AccountError: If the account does not exist
        """
        with self.database.transaction() as session:
            account = AccountRepository(session).get(account_id)
        if account is None:
            raise AccountError(f"Account {account_id} does not exist")
        return account

    def get_accounts(self, include_excluded: bool = True) -> list[Account]:
        with self.database.transaction() as session:
            return AccountRepository(session).all(include_excluded=include_excluded)

    @log_operation
    def delete_account(self, account_id: int) -> None:
        """Delete an account with its holdings and snapshots.

        Orders are kept as history.

        Raises:
            AccountError: If the account does not exist or still has OPEN orders
        """
        with self.database.transaction() as session:
            accounts = AccountRepository(session)
            if accounts.get(account_id) is None:
                raise AccountError(f"Account {account_id} does not exist")

            open_orders = OrderRepository(session).count_open_for_account(account_id)
            if open_orders:
                raise AccountError(
                    f"Account {account_id} has {open_orders} open orders and cannot be deleted"
                )

            removed_investments = InvestmentRepository(session).delete_for_account(account_id)
            removed_snapshots = SnapshotRepository(session).delete_for_account(account_id)
            accounts.delete(account_id)

        logger.info(
            f"Account {account_id} deleted with {removed_investments} investments "
            f"and {removed_snapshots} snapshots"
        )

    def aggregate_accounts(self) -> Account:
        """Roll up balances of every account not excluded from totals."""
        return aggregate_accounts(self.get_accounts(include_excluded=False))

    # Investments
    def get_investments(self, account_id: int) -> list[Investment]:
        with self.database.transaction() as session:
            return InvestmentRepository(session).for_account(account_id)

    def get_all_investments(self) -> list[Investment]:
        with self.database.transaction() as session:
            return InvestmentRepository(session).all()

    def investments_by_account(self) -> dict[int, list[Investment]]:
        grouped: dict[int, list[Investment]] = defaultdict(list)
        for investment in self.get_all_investments():
            grouped[investment.account_id].append(investment)
        return dict(grouped)

    def update_investment(self, investment: Investment) -> Investment:
        if investment.id is None:
            raise InvalidArgumentError("Only stored investments can be updated")
        with self.database.transaction() as session:
            return InvestmentRepository(session).save(investment)

    def refresh_investments(self, quotes: Mapping[str, Quote]) -> int:
        """Apply fresh quotes to every held investment in one transaction.

        Returns:
            Number of investments updated
        """
        if not quotes:
            return 0

        updated = 0
        with self.database.transaction() as session:
            repository = InvestmentRepository(session)
            for investment in repository.all():
                quote = quotes.get(investment.symbol)
                if quote is None:
                    continue
                investment.apply_quote(quote)
                repository.save(investment)
                updated += 1

        logger.debug(f"Refreshed {updated} investments from {len(quotes)} quotes")
        return updated

    def get_last_quote_time(self) -> datetime | None:
        """Latest quote timestamp applied to any investment."""
        with self.database.transaction() as session:
            return InvestmentRepository(session).last_trade_time()

    # Snapshots
    def get_current_snapshot(self, account_id: int | None = None) -> list[PerformanceItem]:
        """Latest snapshot per account, or for one account."""
        with self.database.transaction() as session:
            return SnapshotRepository(session).current(account_id)

    def get_current_daily_snapshot(
        self, days: int, account_id: int | None = None
    ) -> list[PerformanceItem]:
        """Snapshots from the last ``days`` days, oldest first.

        Raises:
            InvalidArgumentError: If days is not a positive int
        """
        days = validate_days(days)
        if days == 0:
            raise InvalidArgumentError("days must be positive, got 0")
        since = self._clock() - timedelta(days=days)
        with self.database.transaction() as session:
            return SnapshotRepository(session).window(since, account_id)

    def rollup(self, items: Iterable[PerformanceItem]) -> list[PerformanceItem]:
        """Sum snapshots per timestamp across accounts not excluded from totals."""
        excluded = {account.id for account in self.get_accounts() if account.exclude_from_totals}

        totals: dict[datetime, PerformanceItem] = {}
        for item in items:
            if item.account_id in excluded:
                continue
            existing = totals.get(item.timestamp)
            totals[item.timestamp] = item if existing is None else existing.aggregate(item)

        return [
            PerformanceItem(
                account_id=None,
                timestamp=item.timestamp,
                initial_balance=item.initial_balance,
                value=item.value,
                today_change=item.today_change,
                cost_basis=item.cost_basis,
            )
            for _, item in sorted(totals.items())
        ]

    def daily_frame(self, days: int, account_id: int | None = None) -> pd.DataFrame:
        """Windowed snapshots as a timestamp-indexed DataFrame of dollar figures.

        Without an account id the frame holds the all-accounts rollup.
        """
        items = self.get_current_daily_snapshot(days, account_id)
        if account_id is None:
            items = self.rollup(items)

        if not items:
            return pd.DataFrame(columns=SNAPSHOT_COLUMNS, index=pd.DatetimeIndex([], name="timestamp"))

        df = pd.DataFrame([item.to_dict() for item in items])
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        return df.set_index("timestamp")[SNAPSHOT_COLUMNS]
