"""
Financial data types for simulated trading.

Monetary values are carried as integer micro-cents so that balances, cost
bases and snapshot totals never accumulate floating point rounding error.

PRECISION:
- 1 dollar = 100 cents = 1,000,000 micro-cents
- Addition, subtraction and multiplication by whole share counts are exact
- Division (pro-rata cost basis, allocations) rounds half-even to the nearest
  micro-cent, and is the only place rounding happens
- Conversion to float is for display and charting only
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

MICRO_CENTS_PER_CENT = 10_000
MICRO_CENTS_PER_DOLLAR = 100 * MICRO_CENTS_PER_CENT

PERCENTAGE_DECIMALS = 4


def _round_half_even(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


@dataclass(frozen=True, order=True, slots=True)
class Money:
    """Fixed-precision monetary amount.

    Instances are immutable; every arithmetic operation returns a new value.

    Examples:
        >>> Money.from_dollars("50.00") * 10
        Money(micro_cents=500000000)
        >>> str(Money.from_dollars(9500))
        '$9,500.00'
    """

    micro_cents: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.micro_cents, int) or isinstance(self.micro_cents, bool):
            raise TypeError(
                f"micro_cents must be int, got {type(self.micro_cents).__name__}"
            )

    @classmethod
    def from_dollars(cls, dollars: str | int | float | Decimal) -> "Money":
        """Build a Money value from a dollar amount.

        Floats are converted through their shortest repr so that ``50.1``
        becomes exactly fifty dollars and ten cents.
        """
        if isinstance(dollars, float):
            dollars = repr(dollars)
        return cls(_round_half_even(Decimal(dollars) * MICRO_CENTS_PER_DOLLAR))

    @property
    def dollars(self) -> Decimal:
        return Decimal(self.micro_cents) / MICRO_CENTS_PER_DOLLAR

    def to_float(self) -> float:
        return self.micro_cents / MICRO_CENTS_PER_DOLLAR

    def is_zero(self) -> bool:
        return self.micro_cents == 0

    def is_negative(self) -> bool:
        return self.micro_cents < 0

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.micro_cents + other.micro_cents)

    def __radd__(self, other: "Money | int") -> "Money":
        # Allows sum() over Money values with the default int start
        if other == 0:
            return self
        return self.__add__(other)  # type: ignore[arg-type]

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.micro_cents - other.micro_cents)

    def __mul__(self, factor: int) -> "Money":
        if not isinstance(factor, int) or isinstance(factor, bool):
            return NotImplemented
        return Money(self.micro_cents * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(-self.micro_cents)

    def pro_rata(self, numerator: int, denominator: int) -> "Money":
        """Return ``self * numerator / denominator`` rounded half-even.

        Raises:
            ValueError: If denominator is not positive
        """
        if denominator <= 0:
            raise ValueError(f"Denominator must be positive, got {denominator}")
        return Money(_round_half_even(Decimal(self.micro_cents) * numerator / denominator))

    def divide(self, parts: int) -> "Money":
        """Split the amount into ``parts`` equal shares, rounded half-even."""
        return self.pro_rata(1, parts)

    def __str__(self) -> str:
        rounded = self.dollars.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)
        sign = "-" if rounded < 0 else ""
        return f"{sign}${abs(rounded):,.2f}"


ZERO = Money(0)


def to_money(value: "Money | str | int | float | Decimal") -> Money:
    """Convert various numeric types to Money (interpreted as dollars).

    Examples:
        >>> to_money(50)
        Money(micro_cents=50000000)
        >>> to_money('1.5')
        Money(micro_cents=1500000)
    """
    if isinstance(value, Money):
        return value
    return Money.from_dollars(value)


def calculate_trade_value(price: Money, quantity: int) -> Money:
    """Calculate the value of ``quantity`` shares at ``price``."""
    return price * quantity


def calculate_change_percent(current: Money, reference: Money) -> float:
    """Percentage change from ``reference`` to ``current``.

    Returns 0.0 when the reference is zero.
    """
    if reference.is_zero():
        return 0.0
    change = Decimal(current.micro_cents - reference.micro_cents) * 100
    return round(float(change / reference.micro_cents), PERCENTAGE_DECIMALS)


def sum_money(values) -> Money:
    """Sum an iterable of Money values (empty iterable sums to zero)."""
    total = 0
    for value in values:
        total += value.micro_cents
    return Money(total)
