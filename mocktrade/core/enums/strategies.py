"""
Account strategy enumeration.

Strategy identifiers only; the handlers live in the strategy registry.
"""

from enum import StrEnum


class Strategy(StrEnum):
    """Automated trading strategy attached to an account."""

    NONE = "none"
    DOGS_OF_THE_DOW = "dogs_of_the_dow"
    TRIPLE_MOMENTUM = "triple_momentum"

    @property
    def is_automated(self) -> bool:
        """Check if the account trades automatically."""
        return self != self.NONE
