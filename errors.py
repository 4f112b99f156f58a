"""Exception types raised by the simulation engine."""

from __future__ import annotations

from collections.abc import Iterable


class SimulationError(Exception):
    """Base class for recoverable simulation errors."""


class ConfigValidationError(SimulationError, ValueError):
    """Raised when configuration entries are missing or outside their declared range."""

    def __init__(self, errors: Iterable[tuple[str, str]]) -> None:
        self.errors: list[tuple[str, str]] = list(errors)
        self.keys: list[str] = [key for key, _ in self.errors]
        details = "; ".join(f"{key}: {reason}" for key, reason in self.errors)
        super().__init__(f"Invalid configuration ({len(self.errors)} entries): {details}")


class InvalidOrder(SimulationError, ValueError):
    """Raised when an order with a non-positive quantity or price is submitted."""


class InsufficientFunds(SimulationError):
    """Raised by the ledger when an account cannot cover a transfer."""

    def __init__(self, account_id: str, requested: object, available: object) -> None:
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Account {account_id} cannot pay {requested} (available: {available})"
        )


class UnknownAccount(SimulationError, KeyError):
    """Raised when a transfer references an account the ledger does not hold."""


class MoneyConservationViolation(AssertionError):
    """Money was created or destroyed outside the modelled channels. Always a bug."""


class InvariantViolation(AssertionError):
    """A standing invariant of the simulation state does not hold. Always a bug."""
