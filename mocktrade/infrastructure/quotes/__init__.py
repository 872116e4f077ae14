"""
Quote source collaborators.
"""

from .guarded import GuardedQuoteSource
from .market_hours import MarketClock
from .simulated import SimulatedQuoteSource

__all__ = ["GuardedQuoteSource", "MarketClock", "SimulatedQuoteSource"]
