"""Fixed-point money used by every account in the simulation.

Amounts are stored as whole cents so that thousands of simulated days of
trades, wages and taxes never accumulate floating point drift.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

CENTS_PER_CREDIT = 100
CURRENCY_SUFFIX = "Cr"

# Multipliers understood by money literals such as "100kCr" or "10MCr".
UNIT_MULTIPLIERS: dict[str, int] = {
    "k": 10**3,
    "M": 10**6,
    "G": 10**9,
    "T": 10**12,
    "P": 10**15,
    "E": 10**18,
}
_DISPLAY_UNITS = ("", "k", "M", "G", "T", "P", "E")


@dataclass(frozen=True, order=True, slots=True)
class Money:
    """An integer number of cents."""

    cents: int = 0

    @classmethod
    def credits(cls, amount: int | float | str) -> Money:
        """Build money from a credit amount (``Money.credits(4)`` is 4Cr)."""
        return cls(_to_cents(Decimal(str(amount))))

    @classmethod
    def parse(cls, literal: str | int | float | Money) -> Money:
        """
        Parse a money literal.

        Accepts compact strings like ``"100kCr"``, ``"1.5 MCr"``, ``"250Cr"``
        or ``"40"``, plain numbers (interpreted as credits) and Money itself.

        Raises:
            ValueError: If the literal cannot be interpreted as money
        """
        if isinstance(literal, Money):
            return literal
        if isinstance(literal, bool):
            raise ValueError(f"Invalid money format: {literal!r}")
        if isinstance(literal, (int, float)):
            return cls.credits(literal)

        text = str(literal).strip()
        if text.endswith(CURRENCY_SUFFIX):
            text = text[: -len(CURRENCY_SUFFIX)].rstrip()
        if not text:
            raise ValueError(f"Invalid money format: {literal!r}")

        multiplier = 1
        if text[-1] in UNIT_MULTIPLIERS:
            multiplier = UNIT_MULTIPLIERS[text[-1]]
            text = text[:-1].rstrip()

        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid money format: {literal!r}") from exc
        if not value.is_finite():
            raise ValueError(f"Invalid money format: {literal!r}")
        return cls(_to_cents(value * multiplier))

    @property
    def as_credits(self) -> float:
        return self.cents / CENTS_PER_CREDIT

    def is_positive(self) -> bool:
        return self.cents > 0

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents + other.cents)

    def __radd__(self, other: object) -> Money:
        # sum() starts from the integer 0
        if other == 0:
            return self
        if isinstance(other, Money):
            return Money(self.cents + other.cents)
        return NotImplemented

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.cents - other.cents)

    def __neg__(self) -> Money:
        return Money(-self.cents)

    def __mul__(self, factor: int | float) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, float)):
            return NotImplemented
        if isinstance(factor, int):
            return Money(self.cents * factor)
        if not math.isfinite(factor):
            raise ValueError(f"Cannot scale money by {factor!r}")
        return Money(round(self.cents * factor))

    __rmul__ = __mul__

    def __floordiv__(self, divisor: int) -> Money:
        if isinstance(divisor, bool) or not isinstance(divisor, int):
            return NotImplemented
        return Money(self.cents // divisor)

    def __bool__(self) -> bool:
        return self.cents != 0

    def __copy__(self) -> Money:
        return self

    def __deepcopy__(self, memo: dict[int, object]) -> Money:
        return self

    def __str__(self) -> str:
        value = abs(self.cents) / CENTS_PER_CREDIT
        unit = ""
        for unit in _DISPLAY_UNITS:
            if value < 1000.0:
                break
            value /= 1000.0
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        sign = "-" if self.cents < 0 else ""
        return f"{sign}{text}{unit}{CURRENCY_SUFFIX}"

    def __repr__(self) -> str:
        return f"Money({self})"


ZERO = Money(0)


def _to_cents(credits: Decimal) -> int:
    return int((credits * CENTS_PER_CREDIT).to_integral_value())


def sum_money(amounts: Iterable[Money]) -> Money:
    return Money(sum(amount.cents for amount in amounts))


def to_literal(amount: Money) -> str:
    """Exact, re-parseable literal (``"1234.56Cr"``) used when dumping config."""
    text = f"{Decimal(amount.cents) / CENTS_PER_CREDIT:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}{CURRENCY_SUFFIX}"
