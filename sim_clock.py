"""Simulation clock / calendar utilities.

Global convention (used everywhere in this project):

- 1 simulation step == 1 day
- 30 days == 1 month

Monthly processes must be triggered deterministically from the day counter via
this module (no ad-hoc modulo logic scattered across the code).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction

DAYS_PER_MONTH = 30


@dataclass
class SimulationClock:
    """Turns elapsed real time into whole simulated days.

    Fractions of a day are carried over exactly, so many small updates add up
    to the same number of days as one large update.
    """

    real_seconds_accumulated: Fraction = field(default_factory=Fraction)
    day_counter: int = 0

    def accumulate(self, seconds: float, seconds_per_day: float) -> int:
        """Add elapsed real seconds and return how many whole days passed.

        A ``seconds_per_day`` of 0 (or less) pauses the clock: nothing is
        accumulated and no day passes.
        """
        if seconds < 0:
            raise ValueError("seconds must be >= 0")
        if seconds_per_day <= 0:
            return 0
        # Decimal reprs of the floats, so 10 x 0.1s is exactly one second.
        day_length = Fraction(str(seconds_per_day))
        self.real_seconds_accumulated += Fraction(str(seconds))
        days, self.real_seconds_accumulated = divmod(self.real_seconds_accumulated, day_length)
        self.day_counter += days
        return days

    def reset_accumulator(self) -> None:
        self.real_seconds_accumulated = Fraction(0)

    # --- Derived indices ---
    @property
    def month_index(self) -> int:
        """0-based month index since start."""
        return self.day_counter // DAYS_PER_MONTH

    # --- Period boundaries ---
    def is_month_end(self, day_index: int | None = None) -> bool:
        d = self.day_counter if day_index is None else int(day_index)
        return is_month_end(d)


def is_month_end(day_index: int) -> bool:
    """True on the last day of every 30-day month (days 29, 59, ...)."""
    return (day_index + 1) % DAYS_PER_MONTH == 0
