"""
Triple Momentum.

Holds whichever of three index funds has the strongest move today. When the
leader changes, everything else is sold and the proceeds move into the
leader.
"""

from collections.abc import Mapping, Sequence

from mocktrade.core.constants import TRIPLE_MOMENTUM_SYMBOLS
from mocktrade.core.enums import OrderSide
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.quote import Quote

from .base import IStrategyHandler, TradeSignal, shares_affordable


class TripleMomentumHandler(IStrategyHandler):
    def __init__(self, universe: Sequence[str] = TRIPLE_MOMENTUM_SYMBOLS) -> None:
        self.universe = tuple(universe)

    def symbols(self, account: Account, investments: Sequence[Investment]) -> list[str]:
        return list(dict.fromkeys([*self.universe, *(i.symbol for i in investments)]))

    def compute_signals(
        self,
        account: Account,
        investments: Sequence[Investment],
        quotes: Mapping[str, Quote],
    ) -> list[TradeSignal]:
        needed = self.symbols(account, investments)
        # Sells and the buy must all fill this pass or none should be placed
        if any(symbol not in quotes or not quotes[symbol].price_is_current for symbol in needed):
            return []

        leader = max(
            (quotes[symbol] for symbol in self.universe),
            key=lambda q: (q.day_change_percent(), q.symbol),
        )
        held = {i.symbol: i for i in investments}
        if set(held) == {leader.symbol}:
            return []

        signals = []
        funds = account.available_funds
        for symbol, investment in held.items():
            if symbol == leader.symbol:
                continue
            signals.append(
                TradeSignal(symbol=symbol, side=OrderSide.SELL, quantity=investment.quantity, reason="rotate out")
            )
            funds = funds + quotes[symbol].price * investment.quantity

        quantity = shares_affordable(funds, leader.price)
        if quantity > 0:
            signals.append(
                TradeSignal(
                    symbol=leader.symbol,
                    side=OrderSide.BUY,
                    quantity=quantity,
                    reason=f"leader at {leader.day_change_percent():+.2f}%",
                )
            )
        return signals
