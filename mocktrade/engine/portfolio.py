"""
Main Portfolio class - orchestrates the engine components.

The Portfolio composes the order store, executor, ledger, snapshot
aggregator, strategy registry and poll scheduler, and owns the execution
pass the scheduler fires.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger

from mocktrade.core.config import EngineSettings
from mocktrade.core.enums import OrderKind, OrderSide
from mocktrade.core.exceptions.trading import (
    AccountError,
    ExecutionDeferredError,
    InvalidArgumentError,
    OrderCancelledError,
    PersistenceFailureError,
    QuoteUnavailableError,
)
from mocktrade.core.interfaces.quotes import IQuoteSource
from mocktrade.core.interfaces.scheduling import IWakeupTimer
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.order import Order, OrderResult
from mocktrade.core.models.quote import Quote
from mocktrade.core.strategies import StrategyRegistry, default_registry
from mocktrade.core.types.financial import Money
from mocktrade.infrastructure.persistence import Database, SqlOrderStore
from mocktrade.infrastructure.quotes import GuardedQuoteSource, MarketClock, SimulatedQuoteSource

from .ledger import AccountLedger
from .order_execution import OrderExecutor
from .poll_scheduler import PollScheduler
from .snapshot_aggregator import SnapshotAggregator, SnapshotBatch


@dataclass
class PassResult:
    """Outcome of one execution pass."""

    fills: list[OrderResult] = field(default_factory=list)
    deferred: int = 0
    errors: int = 0
    signals: int = 0
    snapshot: SnapshotBatch | None = None
    skipped: bool = False

    def log_context(self) -> dict:
        return {
            "filled": len(self.fills),
            "deferred": self.deferred,
            "errors": self.errors,
            "signals": self.signals,
            "skipped": self.skipped,
        }


class Portfolio:
    """Main Portfolio implementation.

    Orchestrates the engine by composing focused components:
    - SqlOrderStore: pending and historical orders
    - OrderExecutor: atomic fills
    - AccountLedger: accounts, holdings and snapshot reads
    - SnapshotAggregator: deduplicated snapshot batches
    - PollScheduler: market-hours aware wake-ups

    Thread Safety:
        At most one execution pass runs at a time per Portfolio. A pass that
        finds the lease taken returns immediately instead of queueing.
    """

    def __init__(
        self,
        database: Database,
        quote_source: IQuoteSource,
        settings: EngineSettings | None = None,
        registry: StrategyRegistry | None = None,
        timer: IWakeupTimer | None = None,
        market_clock: MarketClock | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.database = database
        self._clock = clock or (lambda: datetime.now(UTC))

        if isinstance(quote_source, GuardedQuoteSource):
            self.quotes = quote_source
        else:
            self.quotes = GuardedQuoteSource(
                quote_source,
                timeout_seconds=self.settings.quote_timeout_seconds,
                market_clock=market_clock or MarketClock.from_settings(self.settings, clock),
            )

        self.order_store = SqlOrderStore(database)
        self.ledger = AccountLedger(database, self._clock)
        self.executor = OrderExecutor(database, self._clock)
        self.aggregator = SnapshotAggregator(
            database, self.settings.snapshot_granularity_seconds, self._clock
        )
        self.registry = registry or default_registry()
        self.scheduler = PollScheduler(
            self.order_store,
            self.quotes,
            self.run_pass,
            timer=timer,
            poll_interval_seconds=self.settings.poll_interval_seconds,
            clock=self._clock,
        )
        self._pass_lease = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: EngineSettings, quote_source: IQuoteSource | None = None, **kwargs
    ) -> "Portfolio":
        """Build a Portfolio with its own database and schema."""
        database = Database(settings.database_url)
        database.create_schema()
        if quote_source is None:
            quote_source = SimulatedQuoteSource(
                MarketClock.from_settings(settings, kwargs.get("clock"))
            )
        return cls(database, quote_source, settings=settings, **kwargs)

    # Orders
    def place_order(
        self,
        account_id: int,
        symbol: str,
        side: OrderSide,
        quantity: int,
        kind: OrderKind = OrderKind.MARKET,
        trigger_price: Money | None = None,
    ) -> Order:
        """Create an OPEN order and make sure a wake-up is armed for it.

        Raises:
            InvalidArgumentError: If the order terms are invalid
            AccountError: If the account does not exist
        """
        self.ledger.get_account(account_id)
        order = self.order_store.create_order(
            Order.create(account_id, symbol, side, kind, quantity, trigger_price)
        )
        self.scheduler.schedule_if_needed()
        return order

    def cancel_order(self, order_id: int, reason: str = "cancelled by user") -> Order:
        order = self.order_store.cancel_order(order_id, reason)
        self.scheduler.schedule_if_needed()
        return order

    def get_open_orders(self) -> list[Order]:
        return self.order_store.get_open_orders()

    def process_orders(self, force: bool = False) -> PassResult | None:
        """Run a pass now when forced or the market is open; otherwise arm for the open."""
        return self.scheduler.process_orders(force)

    def force_execute(self) -> PassResult:
        """Administrative override: run a pass now regardless of market hours."""
        return self.scheduler.force_run()

    def purge_snapshots(self, older_than_days: int | None = None) -> int:
        if older_than_days is None:
            older_than_days = self.settings.snapshot_retention_days
        return self.aggregator.purge_snapshots(older_than_days)

    # Execution pass
    def run_pass(self) -> PassResult:
        """Run one execution pass under the exclusive pass lease."""
        if not self._pass_lease.acquire(blocking=False):
            logger.warning("Execution pass already in flight, skipping overlapping wake-up")
            return PassResult(skipped=True)

        try:
            result = self._execute_pass()
        finally:
            self._pass_lease.release()

        logger.info(
            f"Execution pass finished: {len(result.fills)} filled, {result.deferred} deferred, "
            f"{result.errors} failed",
            extra=result.log_context(),
        )
        return result

    def _execute_pass(self) -> PassResult:
        result = PassResult()

        accounts = self.ledger.get_accounts()
        holdings = self.ledger.investments_by_account()
        open_orders = self.order_store.get_open_orders()

        strategy_accounts = self._strategy_accounts(accounts, open_orders)
        symbols = {order.symbol for order in open_orders}
        symbols.update(i.symbol for investments in holdings.values() for i in investments)
        for account, handler in strategy_accounts:
            symbols.update(handler.symbols(account, holdings.get(account.id, [])))

        quotes = self.quotes.get_quotes(sorted(symbols))
        logger.debug(f"Fetched {len(quotes)} of {len(symbols)} quotes")

        if strategy_accounts:
            result.signals = self._place_signals(strategy_accounts, holdings, quotes)
            if result.signals:
                open_orders = self.order_store.get_open_orders()

        for order in open_orders:
            self._execute_order(order, quotes, result)

        self.ledger.refresh_investments(quotes)
        if self.quotes.is_in_poll_time():
            self.quotes.arm_quote_poll()

        result.snapshot = self.aggregator.create_snapshot_totals(
            self.ledger.get_accounts(), self.ledger.investments_by_account()
        )
        return result

    def _execute_order(self, order: Order, quotes: dict[str, Quote], result: PassResult) -> None:
        try:
            quote = quotes.get(order.symbol)
            if quote is None:
                raise QuoteUnavailableError(order.symbol, order.id)
            result.fills.append(self.executor.attempt_execute(order, quote))
        except ExecutionDeferredError as e:
            logger.debug(f"Order {order.id} stays open: {e.reason}")
            result.deferred += 1
        except OrderCancelledError as e:
            logger.debug(str(e))
        except (AccountError, InvalidArgumentError, PersistenceFailureError):
            # Already logged and, where terminal, moved to ERROR by the executor
            result.errors += 1

    def _strategy_accounts(self, accounts: list[Account], open_orders: list[Order]):
        busy = {order.account_id for order in open_orders}
        selected = []
        for account in accounts:
            if not account.strategy.is_automated or account.id in busy:
                continue
            handler = self.registry.get(account.strategy)
            if handler is None:
                logger.warning(f"No handler registered for strategy {account.strategy}")
                continue
            selected.append((account, handler))
        return selected

    def _place_signals(
        self,
        strategy_accounts,
        holdings: dict[int, list[Investment]],
        quotes: dict[str, Quote],
    ) -> int:
        placed = 0
        for account, handler in strategy_accounts:
            signals = handler.compute_signals(account, holdings.get(account.id, []), quotes)
            for signal in signals:
                self.order_store.create_order(
                    Order.create(account.id, signal.symbol, signal.side, OrderKind.MARKET, signal.quantity)
                )
                logger.info(
                    f"{account.strategy} signal for account {account.id}: "
                    f"{signal.side} {signal.quantity} {signal.symbol} ({signal.reason})"
                )
                placed += 1
        return placed

    def shutdown(self) -> None:
        self.scheduler.timer.shutdown()
