# labor_market.py
from config import SimulationConfig
from logger import log
from money import ZERO, Money

from .base_agent import BaseAgent, agent_sort_key
from .protocols import EmployerProtocol, WorkerProtocol


class LaborMarket(BaseAgent):
    """
    Keeps track of who works where.

    Handles:
    - Registration of people who can be employed
    - Listing unemployed people in id order
    - Hiring and releasing workers, keeping both sides of the link consistent
    - Computing the unemployment rate
    """

    agent_type = "LaborMarket"

    def __init__(self, unique_id: str = "labor_market", *, config: SimulationConfig) -> None:
        """
        Initialize a labor market.

        Args:
            unique_id: Unique identifier for this labor market
            config: Simulation configuration
        """
        super().__init__(unique_id)
        self.config: SimulationConfig = config
        self.registered_workers: dict[str, WorkerProtocol] = {}
        self.latest_unemployment_rate: float = 0.0

    def register_worker(self, worker: WorkerProtocol) -> None:
        """
        Register a person who can be hired.

        Args:
            worker: Worker agent looking for employment
        """
        if worker.unique_id not in self.registered_workers:
            self.registered_workers[worker.unique_id] = worker
            log(f"LaborMarket {self.unique_id}: Registered worker {worker.unique_id}.", level="DEBUG")

    def unemployed(self) -> list[WorkerProtocol]:
        return [
            self.registered_workers[worker_id]
            for worker_id in sorted(self.registered_workers, key=agent_sort_key)
            if self.registered_workers[worker_id].employer_id is None
        ]

    def hire(
        self,
        employer: EmployerProtocol,
        worker: WorkerProtocol,
        salary: Money,
        current_day: int,
    ) -> None:
        """
        Employ a worker at the given daily salary.

        Raises:
            ValueError: If the worker already has an employer
        """
        if worker.employer_id is not None:
            raise ValueError(f"Worker {worker.unique_id} is already employed by {worker.employer_id}")
        worker.employer_id = employer.unique_id
        worker.salary = salary
        employer.staff.append(worker.unique_id)
        employer.last_staff_change_day = current_day
        log(
            f"LaborMarket {self.unique_id}: Matched worker {worker.unique_id} "
            f"with employer {employer.unique_id} at salary {salary}.",
            level="INFO",
        )

    def release(
        self,
        employer: EmployerProtocol,
        worker: WorkerProtocol,
        current_day: int,
        *,
        counts_as_staff_change: bool = True,
    ) -> None:
        """Mark a worker as unemployed so they can be matched again."""
        if worker.unique_id in employer.staff:
            employer.staff.remove(worker.unique_id)
        worker.employer_id = None
        worker.salary = ZERO
        if counts_as_staff_change:
            employer.last_staff_change_day = current_day
        log(
            f"LaborMarket {self.unique_id}: Worker {worker.unique_id} released back to market "
            f"by {employer.unique_id}.",
            level="INFO",
        )

    def compute_unemployment_rate(self) -> float:
        total_workers: int = len(self.registered_workers)
        if total_workers == 0:
            return 0.0
        unemployed = sum(1 for worker in self.registered_workers.values() if worker.employer_id is None)
        return unemployed / total_workers

    def step(self, current_day: int) -> float:
        """Refresh the unemployment statistic for the day."""
        self.latest_unemployment_rate = self.compute_unemployment_rate()
        log(
            f"LaborMarket {self.unique_id} completed day {current_day} "
            f"(unemployment {self.latest_unemployment_rate:.2%}).",
            level="DEBUG",
        )
        return self.latest_unemployment_rate
