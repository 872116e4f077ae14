"""
Quote source interface.

The quote transport is an external collaborator; the engine only relies on
this contract and treats every call as possibly failing.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from mocktrade.core.models.quote import Quote


class IQuoteSource(ABC):
    """Abstract interface for market quotes and session hours."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Quote:
        """Get the latest quote for one symbol."""
        pass

    @abstractmethod
    def get_quotes(self, symbols: Iterable[str]) -> dict[str, Quote]:
        """Get the latest quotes keyed by symbol; unknown symbols are omitted."""
        pass

    @abstractmethod
    def is_market_open(self) -> bool:
        """Check whether the market is in its regular session now."""
        pass

    @abstractmethod
    def next_market_open(self) -> datetime:
        """Get the start of the next regular session."""
        pass

    @abstractmethod
    def is_in_poll_time(self) -> bool:
        """Check whether quotes are worth polling now."""
        pass

    @abstractmethod
    def arm_quote_poll(self) -> None:
        """Arm the collaborator's own quote refresh."""
        pass
