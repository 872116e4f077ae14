"""
Guarded quote source.

Wraps an external quote source so that a slow or failing transport never
breaks an execution pass: every call is bounded by a timeout and failures
degrade to stale quotes instead of raising.
"""

import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime

from cachetools import LRUCache
from loguru import logger

from mocktrade.core.exceptions.trading import QuoteUnavailableError
from mocktrade.core.interfaces.quotes import IQuoteSource
from mocktrade.core.models.quote import Quote

from .market_hours import MarketClock


class GuardedQuoteSource(IQuoteSource):
    """Timeout-bounded, failure-tolerant view of another quote source.

    The last good quote per symbol is kept; when a refresh fails it is
    returned again flagged as not current.

    Each call runs on its own short-lived worker thread. A timed-out call
    cannot be interrupted, so a hung transport keeps that one thread until
    it returns, but never delays later calls.
    """

    def __init__(
        self,
        source: IQuoteSource,
        timeout_seconds: float = 10.0,
        market_clock: MarketClock | None = None,
        cache_size: int = 1024,
    ) -> None:
        self.source = source
        self.timeout_seconds = timeout_seconds
        self.market_clock = market_clock or MarketClock()
        # Bounded so symbols that stop being polled eventually drop out
        self._last_quotes: LRUCache[str, Quote] = LRUCache(maxsize=cache_size)
        self._cache_lock = threading.Lock()
        self._abandoned = 0
        self._abandoned_lock = threading.Lock()

    @property
    def abandoned_calls(self) -> int:
        """Timed-out calls whose worker thread is still running."""
        with self._abandoned_lock:
            return self._abandoned

    def _release(self, future) -> None:
        with self._abandoned_lock:
            self._abandoned -= 1

    def _call(self, description: str, func, *args):
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="quotes")
        try:
            future = executor.submit(func, *args)
            try:
                return future.result(timeout=self.timeout_seconds)
            except FutureTimeoutError:
                with self._abandoned_lock:
                    self._abandoned += 1
                future.add_done_callback(self._release)
                logger.warning(
                    f"Quote source timed out after {self.timeout_seconds}s: {description} "
                    f"({self.abandoned_calls} calls still running)"
                )
                raise
            except Exception as e:
                logger.warning(f"Quote source failed: {description}: {e}")
                raise
        finally:
            executor.shutdown(wait=False)

    def _remember(self, quotes: Iterable[Quote]) -> None:
        with self._cache_lock:
            for quote in quotes:
                self._last_quotes[quote.symbol] = quote

    def _stale(self, symbols: Iterable[str]) -> dict[str, Quote]:
        with self._cache_lock:
            return {
                symbol: self._last_quotes[symbol].as_stale()
                for symbol in symbols
                if symbol in self._last_quotes
            }

    def get_quote(self, symbol: str) -> Quote:
        try:
            quote = self._call(f"get_quote({symbol})", self.source.get_quote, symbol)
        except Exception as e:
            stale = self._stale([symbol])
            if symbol in stale:
                return stale[symbol]
            raise QuoteUnavailableError(symbol) from e
        self._remember([quote])
        return quote

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        symbols = list(dict.fromkeys(symbols))
        if not symbols:
            return {}
        try:
            quotes = self._call(f"get_quotes({len(symbols)} symbols)", self.source.get_quotes, symbols)
        except Exception:
            return self._stale(symbols)

        self._remember(quotes.values())
        missing = [symbol for symbol in symbols if symbol not in quotes]
        if missing:
            logger.debug(f"No quotes returned for {missing}")
            quotes = {**self._stale(missing), **quotes}
        return quotes

    def is_market_open(self) -> bool:
        try:
            return bool(self._call("is_market_open", self.source.is_market_open))
        except Exception:
            return False

    def next_market_open(self) -> datetime:
        try:
            return self._call("next_market_open", self.source.next_market_open)
        except Exception:
            return self.market_clock.next_open()

    def is_in_poll_time(self) -> bool:
        try:
            return bool(self._call("is_in_poll_time", self.source.is_in_poll_time))
        except Exception:
            return False

    def arm_quote_poll(self) -> None:
        try:
            self._call("arm_quote_poll", self.source.arm_quote_poll)
        except Exception:
            logger.warning("Quote poll could not be armed; next pass will retry")
