"""
Strategy registry.

Maps strategy identifiers to handler instances, populated at startup.
"""

from loguru import logger

from mocktrade.core.enums import Strategy
from mocktrade.core.exceptions.trading import ConfigurationError

from .base import IStrategyHandler
from .dogs_of_the_dow import DogsOfTheDowHandler
from .triple_momentum import TripleMomentumHandler


class StrategyRegistry:
    """Lookup of strategy handlers by identifier."""

    def __init__(self) -> None:
        self._handlers: dict[Strategy, IStrategyHandler] = {}

    def register(self, strategy: Strategy, handler: IStrategyHandler) -> None:
        strategy = Strategy(strategy)
        if not strategy.is_automated:
            raise ConfigurationError(f"Strategy {strategy} does not take a handler")
        self._handlers[strategy] = handler
        logger.debug(f"Registered {type(handler).__name__} for {strategy}")

    def get(self, strategy: Strategy) -> IStrategyHandler | None:
        return self._handlers.get(Strategy(strategy))

    def __contains__(self, strategy: object) -> bool:
        return strategy in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def default_registry() -> StrategyRegistry:
    registry = StrategyRegistry()
    registry.register(Strategy.DOGS_OF_THE_DOW, DogsOfTheDowHandler())
    registry.register(Strategy.TRIPLE_MOMENTUM, TripleMomentumHandler())
    return registry
