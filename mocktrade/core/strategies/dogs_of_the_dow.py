"""
Dogs of the Dow.

Buys the highest dividend yielders of the Dow, equal-weighted, into an
empty account. Holdings are left alone once bought.
"""

from collections.abc import Mapping, Sequence

from mocktrade.core.constants import DOGS_OF_THE_DOW_COUNT, DOW_SYMBOLS
from mocktrade.core.enums import OrderSide
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.quote import Quote

from .base import IStrategyHandler, TradeSignal, shares_affordable


class DogsOfTheDowHandler(IStrategyHandler):
    def __init__(self, universe: Sequence[str] = DOW_SYMBOLS, count: int = DOGS_OF_THE_DOW_COUNT) -> None:
        self.universe = tuple(universe)
        self.count = count

    def symbols(self, account: Account, investments: Sequence[Investment]) -> list[str]:
        return [] if investments else list(self.universe)

    def compute_signals(
        self,
        account: Account,
        investments: Sequence[Investment],
        quotes: Mapping[str, Quote],
    ) -> list[TradeSignal]:
        if investments:
            return []

        candidates = [
            quotes[symbol]
            for symbol in self.universe
            if symbol in quotes and quotes[symbol].price_is_current and quotes[symbol].price.micro_cents > 0
        ]
        # Highest yield first; symbol breaks ties
        candidates.sort(key=lambda q: (-q.dividend_yield(), q.symbol))
        dogs = candidates[: self.count]
        if not dogs:
            return []

        allocation = account.available_funds.divide(len(dogs))
        signals = []
        for quote in dogs:
            quantity = shares_affordable(allocation, quote.price)
            if quantity > 0:
                signals.append(
                    TradeSignal(
                        symbol=quote.symbol,
                        side=OrderSide.BUY,
                        quantity=quantity,
                        reason=f"dividend yield {quote.dividend_yield():.2%}",
                    )
                )
        return signals
