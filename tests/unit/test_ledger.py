"""
Unit tests for AccountLedger.
"""

from datetime import UTC, datetime, timedelta

import pandas as pd
import pytest

from mocktrade.core.enums import OrderKind, OrderSide, Strategy
from mocktrade.core.exceptions.trading import AccountError, InvalidArgumentError, ValidationError
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order
from mocktrade.core.models.performance import PerformanceItem
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money
from mocktrade.engine.ledger import SNAPSHOT_COLUMNS, AccountLedger
from mocktrade.infrastructure.persistence import InvestmentRepository, SnapshotRepository, SqlOrderStore

NOW = datetime(2024, 1, 3, 15, 0, tzinfo=UTC)


def usd(amount: str) -> Money:
    return Money.from_dollars(amount)


class TestAccountLedger:
    """Test account CRUD, holdings and snapshot reads."""

    @pytest.fixture
    def ledger(self, database, clock) -> AccountLedger:
        clock.now = NOW
        return AccountLedger(database, clock)

    def add_holding(self, database, account_id: int, symbol: str = "ACME", quantity: int = 10) -> Investment:
        with database.transaction() as session:
            return InvestmentRepository(session).save(
                Investment(
                    account_id=account_id,
                    symbol=symbol,
                    quantity=quantity,
                    cost_basis=usd("50") * quantity,
                    price=usd("50"),
                    prev_day_close=usd("50"),
                    last_trade_time=NOW - timedelta(hours=1),
                )
            )

    def add_snapshot(self, database, account_id: int, timestamp: datetime, value: str) -> None:
        with database.transaction() as session:
            SnapshotRepository(session).insert(
                PerformanceItem(account_id, timestamp, usd("1000"), usd(value), usd("0"), usd("1000"))
            )

    def test_should_create_and_fetch_account(self, ledger) -> None:
        # Act
        account = ledger.create_account(" Retirement ", "10000", description="IRA")

        # Assert
        assert account.id is not None
        fetched = ledger.get_account(account.id)
        assert fetched.name == "Retirement"
        assert fetched.available_funds == usd("10000")
        assert fetched.strategy == Strategy.NONE

    def test_should_validate_account_fields(self, ledger) -> None:
        with pytest.raises(ValidationError, match="Name must not be empty"):
            ledger.create_account("", "100")
        assert ledger.get_accounts() == []

    def test_should_raise_for_missing_account(self, ledger) -> None:
        with pytest.raises(AccountError, match="does not exist"):
            ledger.get_account(42)

    def test_should_filter_excluded_accounts(self, ledger) -> None:
        ledger.create_account("Main", "100")
        ledger.create_account("Side", "200", exclude_from_totals=True)

        assert len(ledger.get_accounts()) == 2
        assert [a.name for a in ledger.get_accounts(include_excluded=False)] == ["Main"]
        assert ledger.aggregate_accounts().initial_balance == usd("100")

    def test_should_delete_account_with_holdings_and_snapshots(self, ledger, database) -> None:
        # Arrange
        account = ledger.create_account("Main", "100")
        self.add_holding(database, account.id)
        self.add_snapshot(database, account.id, NOW, "100")

        # Act
        ledger.delete_account(account.id)

        # Assert
        assert ledger.get_accounts() == []
        assert ledger.get_all_investments() == []
        assert ledger.get_current_snapshot() == []

    def test_should_refuse_delete_with_open_orders(self, ledger, database) -> None:
        # Arrange
        account = ledger.create_account("Main", "100")
        SqlOrderStore(database).create_order(
            Order.create(account.id, "ACME", OrderSide.BUY, OrderKind.MARKET, 1)
        )

        # Act & Assert
        with pytest.raises(AccountError, match="open orders"):
            ledger.delete_account(account.id)
        assert ledger.get_account(account.id).name == "Main"

    def test_should_group_investments_by_account(self, ledger, database) -> None:
        a = ledger.create_account("A", "100")
        b = ledger.create_account("B", "100")
        self.add_holding(database, a.id, "ACME")
        self.add_holding(database, a.id, "GLOB")
        self.add_holding(database, b.id, "ACME")

        grouped = ledger.investments_by_account()

        assert [i.symbol for i in grouped[a.id]] == ["ACME", "GLOB"]
        assert [i.symbol for i in grouped[b.id]] == ["ACME"]
        assert len(ledger.get_investments(a.id)) == 2

    def test_should_refresh_investments_from_quotes(self, ledger, database) -> None:
        # Arrange
        account = ledger.create_account("A", "100")
        self.add_holding(database, account.id, "ACME")
        self.add_holding(database, account.id, "GLOB")
        quotes = {"ACME": Quote("ACME", usd("55"), usd("52"), NOW, price_is_current=True)}

        # Act
        updated = ledger.refresh_investments(quotes)

        # Assert
        assert updated == 1
        acme, glob = ledger.get_investments(account.id)
        assert acme.price == usd("55")
        assert acme.prev_day_close == usd("52")
        assert acme.price_is_current is True
        assert glob.price == usd("50")
        assert ledger.get_last_quote_time() == NOW

    def test_should_update_stored_investment(self, ledger, database) -> None:
        account = ledger.create_account("A", "100")
        investment = self.add_holding(database, account.id)

        investment.quantity = 3
        ledger.update_investment(investment)

        assert ledger.get_investments(account.id)[0].quantity == 3

    def test_should_return_latest_snapshot_per_account(self, ledger, database) -> None:
        # Arrange
        a = ledger.create_account("A", "100")
        b = ledger.create_account("B", "100")
        self.add_snapshot(database, a.id, NOW - timedelta(minutes=1), "90")
        self.add_snapshot(database, a.id, NOW, "95")
        self.add_snapshot(database, b.id, NOW - timedelta(minutes=5), "80")

        # Act
        current = ledger.get_current_snapshot()

        # Assert
        assert {(i.account_id, i.value) for i in current} == {(a.id, usd("95")), (b.id, usd("80"))}
        assert [i.value for i in ledger.get_current_snapshot(b.id)] == [usd("80")]

    def test_should_read_daily_window_oldest_first(self, ledger, database) -> None:
        # Arrange
        a = ledger.create_account("A", "100")
        self.add_snapshot(database, a.id, NOW - timedelta(days=2), "70")
        self.add_snapshot(database, a.id, NOW - timedelta(hours=2), "90")
        self.add_snapshot(database, a.id, NOW - timedelta(hours=5), "85")

        # Act
        window = ledger.get_current_daily_snapshot(1, a.id)

        # Assert
        assert [i.value for i in window] == [usd("85"), usd("90")]

    def test_should_reject_empty_window(self, ledger) -> None:
        with pytest.raises(InvalidArgumentError):
            ledger.get_current_daily_snapshot(0)

    def test_should_roll_up_per_timestamp_without_excluded_accounts(self, ledger, database) -> None:
        # Arrange
        a = ledger.create_account("A", "100")
        b = ledger.create_account("B", "100")
        hidden = ledger.create_account("Hidden", "100", exclude_from_totals=True)
        for account, value in ((a, "100"), (b, "200"), (hidden, "1000")):
            self.add_snapshot(database, account.id, NOW, value)
        self.add_snapshot(database, a.id, NOW - timedelta(minutes=1), "99")

        # Act
        rollup = ledger.rollup(ledger.get_current_daily_snapshot(1))

        # Assert
        assert [(i.timestamp, i.value) for i in rollup] == [
            (NOW - timedelta(minutes=1), usd("99")),
            (NOW, usd("300")),
        ]
        assert all(i.account_id is None for i in rollup)

    def test_should_build_daily_frame(self, ledger, database) -> None:
        # Arrange
        a = ledger.create_account("A", "100")
        self.add_snapshot(database, a.id, NOW - timedelta(minutes=1), "99.5")
        self.add_snapshot(database, a.id, NOW, "100")

        # Act
        df = ledger.daily_frame(1)

        # Assert
        assert list(df.columns) == SNAPSHOT_COLUMNS
        assert len(df) == 2
        assert df["value"].tolist() == [99.5, 100.0]
        assert df.index[-1] == pd.Timestamp(NOW)

    def test_should_build_empty_frame_without_snapshots(self, ledger) -> None:
        df = ledger.daily_frame(1)

        assert df.empty
        assert list(df.columns) == SNAPSHOT_COLUMNS
