"""
Automated account strategies.
"""

from .base import IStrategyHandler, TradeSignal
from .dogs_of_the_dow import DogsOfTheDowHandler
from .registry import StrategyRegistry, default_registry
from .triple_momentum import TripleMomentumHandler

__all__ = [
    "DogsOfTheDowHandler",
    "IStrategyHandler",
    "StrategyRegistry",
    "TradeSignal",
    "TripleMomentumHandler",
    "default_registry",
]
