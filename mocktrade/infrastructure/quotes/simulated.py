"""
In-process quote source for paper trading.

Prices are pushed in by the caller (a feed adapter, a replay script or a
test) instead of being fetched over the network.
"""

import threading
from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from mocktrade.core.exceptions.trading import QuoteUnavailableError
from mocktrade.core.interfaces.quotes import IQuoteSource
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import ZERO, Money, to_money
from mocktrade.core.utils.validation import validate_symbol

from .market_hours import MarketClock


class SimulatedQuoteSource(IQuoteSource):
    """Quote source backed by an in-memory price table."""

    def __init__(self, market_clock: MarketClock | None = None) -> None:
        self.market_clock = market_clock or MarketClock()
        self._prices: dict[str, tuple[Money, Money, Money, datetime]] = {}
        self._lock = threading.Lock()
        self.poll_armed_count = 0

    def set_price(
        self,
        symbol: str,
        price: Money | str | int | float,
        previous_close: Money | str | int | float | None = None,
        dividend_per_share: Money | str | int | float = ZERO,
        timestamp: datetime | None = None,
    ) -> None:
        """Record the latest print for a symbol."""
        symbol = validate_symbol(symbol)
        price = to_money(price)
        previous_close = to_money(previous_close) if previous_close is not None else price
        timestamp = timestamp or self.market_clock.now()
        with self._lock:
            self._prices[symbol] = (price, previous_close, to_money(dividend_per_share), timestamp)

    def _build_quote(self, symbol: str) -> Quote | None:
        entry = self._prices.get(symbol)
        if entry is None:
            return None
        price, previous_close, dividend, timestamp = entry
        return Quote(
            symbol=symbol,
            price=price,
            previous_close=previous_close,
            timestamp=timestamp,
            price_is_current=self.market_clock.is_price_current(timestamp),
            dividend_per_share=dividend,
        )

    def get_quote(self, symbol: str) -> Quote:
        symbol = validate_symbol(symbol)
        with self._lock:
            quote = self._build_quote(symbol)
        if quote is None:
            raise QuoteUnavailableError(symbol)
        return quote

    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        quotes = {}
        with self._lock:
            for symbol in symbols:
                quote = self._build_quote(validate_symbol(symbol))
                if quote is not None:
                    quotes[quote.symbol] = quote
        return quotes

    def is_market_open(self) -> bool:
        return self.market_clock.is_open()

    def next_market_open(self) -> datetime:
        return self.market_clock.next_open()

    def is_in_poll_time(self) -> bool:
        return self.market_clock.is_in_poll_time()

    def arm_quote_poll(self) -> None:
        self.poll_armed_count += 1
        logger.debug("Simulated quote poll armed")
