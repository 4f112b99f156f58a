"""Agent protocols shared by the markets and the engine."""

from typing import Protocol, runtime_checkable

from money import Money


@runtime_checkable
class HasUniqueID(Protocol):
    """Protocol for agents with unique identifiers (also their ledger account id)."""

    unique_id: str


@runtime_checkable
class WorkerProtocol(HasUniqueID, Protocol):
    """Protocol for workers in the labor market."""

    employer_id: str | None
    salary: Money


@runtime_checkable
class EmployerProtocol(HasUniqueID, Protocol):
    """Protocol for employers in the labor market."""

    staff: list[str]
    last_staff_change_day: int | None
