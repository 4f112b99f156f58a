"""Real-time pacing of a simulation run.

The driver turns elapsed wall-clock seconds into whole simulated days and
offers the speed commands of an interactive session (set speed, pause, step).
"""

from __future__ import annotations

import numpy as np

from config import SimulationConfig
from logger import log
from sim_clock import SimulationClock
from simulation.engine import SimulationState, advance_one_day, initialize, make_random_source, query
from simulation.views import SimulationView

BASE_SECONDS_PER_DAY = 1.0


class SimulationDriver:
    """Owns a running simulation: its state, random source and clock."""

    def __init__(
        self,
        config: SimulationConfig,
        rng: np.random.Generator | None = None,
        state: SimulationState | None = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else make_random_source(config.seed)
        self.state = state if state is not None else initialize(config, self.rng)
        self.clock = SimulationClock(day_counter=self.state.day)
        self.seconds_per_day: float = config.game.speed.value

    @property
    def paused(self) -> bool:
        return self.seconds_per_day <= 0

    def update(self, elapsed_seconds: float) -> int:
        """
        Advance by the whole days that ``elapsed_seconds`` completes.

        Returns:
            Number of days simulated
        """
        days = self.clock.accumulate(elapsed_seconds, self.seconds_per_day)
        for _ in range(days):
            self.state = advance_one_day(self.state, self.rng)
        return days

    def set_speed(self, days_per_second: float) -> None:
        """Run at ``days_per_second`` simulated days per real second; 0 pauses."""
        if days_per_second < 0:
            raise ValueError("days_per_second must be >= 0")
        self.seconds_per_day = 0.0 if days_per_second == 0 else BASE_SECONDS_PER_DAY / days_per_second
        log(f"Simulation speed set to {days_per_second} days/s.", level="INFO")

    def pause(self) -> None:
        self.set_speed(0)

    def advance_day(self) -> bool:
        """
        Pause a running simulation, or simulate one day of a paused one.

        Returns:
            True if a day was simulated
        """
        if not self.paused:
            self.pause()
            return False
        self.state = advance_one_day(self.state, self.rng)
        self.clock.day_counter += 1
        self.clock.reset_accumulator()
        return True

    def view(self) -> SimulationView:
        return query(self.state)
