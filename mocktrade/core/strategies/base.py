"""
Strategy handler interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from mocktrade.core.constants import MAX_ORDER_QUANTITY
from mocktrade.core.enums import OrderSide
from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.quote import Quote
from mocktrade.core.types.financial import Money


@dataclass(frozen=True)
class TradeSignal:
    """A trade a strategy wants placed as a MARKET order."""

    symbol: str
    side: OrderSide
    quantity: int
    reason: str = ""


def shares_affordable(funds: Money, price: Money) -> int:
    """Whole shares of ``price`` that ``funds`` can buy, capped at the order limit."""
    if price.micro_cents <= 0 or funds.micro_cents <= 0:
        return 0
    return min(funds.micro_cents // price.micro_cents, MAX_ORDER_QUANTITY)


class IStrategyHandler(ABC):
    """Abstract interface for automated account strategies."""

    @abstractmethod
    def symbols(self, account: Account, investments: Sequence[Investment]) -> list[str]:
        """Symbols the handler needs quotes for."""
        pass

    @abstractmethod
    def compute_signals(
        self,
        account: Account,
        investments: Sequence[Investment],
        quotes: Mapping[str, Quote],
    ) -> list[TradeSignal]:
        """Compute the trades to place for an account this pass."""
        pass
