# ledger.py
"""
Single arbiter of money movement.

Every balance in the simulation lives here. Agents never change a balance
directly; all payments go through :meth:`Ledger.transfer`, which verifies after
each booking that the total amount of money is unchanged.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Literal, TypeAlias

from errors import InsufficientFunds, MoneyConservationViolation, UnknownAccount
from logger import log
from money import ZERO, Money, sum_money

TransferKind: TypeAlias = Literal[
    "trade",
    "salary",
    "tax",
    "dividend",
    "business_creation",
    "liquidation",
]


@dataclass(frozen=True)
class Transfer:
    """One booked payment."""

    day: int
    source: str
    destination: str
    amount: Money
    kind: TransferKind


class Ledger:
    """Account balances with conservation checks and a bounded journal."""

    def __init__(self, journal_size: int = 1_000) -> None:
        self._balances: dict[str, Money] = {}
        self._money_supply: Money = ZERO
        self.journal: deque[Transfer] = deque(maxlen=journal_size)

    def open_account(self, account_id: str, initial: Money = ZERO) -> None:
        """
        Open an account, optionally seeded with money.

        Seeding is only used while the simulation is initialized; it is the one
        place where money enters the system.

        Raises:
            ValueError: If the account exists or the seed is negative
        """
        if account_id in self._balances:
            raise ValueError(f"Account {account_id} already exists")
        if initial.cents < 0:
            raise ValueError(f"Account {account_id} cannot start with negative money {initial}")
        self._balances[account_id] = initial
        self._money_supply = self._money_supply + initial

    def has_account(self, account_id: str) -> bool:
        return account_id in self._balances

    def balance(self, account_id: str) -> Money:
        try:
            return self._balances[account_id]
        except KeyError:
            raise UnknownAccount(account_id) from None

    def can_pay(self, account_id: str, amount: Money) -> bool:
        return self.balance(account_id) >= amount

    def transfer(
        self,
        source: str,
        destination: str,
        amount: Money,
        kind: TransferKind,
        day: int,
    ) -> Transfer:
        """
        Move money between two accounts.

        Args:
            source: Paying account
            destination: Receiving account
            amount: Non-negative amount to move
            kind: What the payment is for (kept in the journal)
            day: Simulated day of the payment

        Returns:
            The booked transfer

        Raises:
            ValueError: If the amount is negative
            UnknownAccount: If either account does not exist
            InsufficientFunds: If the source cannot cover the amount
            MoneyConservationViolation: If the booking changed the money supply
        """
        if amount.cents < 0:
            raise ValueError(f"Transfer amount must not be negative, got {amount}")
        for account_id in (source, destination):
            if account_id not in self._balances:
                raise UnknownAccount(account_id)
        available = self._balances[source]
        if available < amount:
            raise InsufficientFunds(source, amount, available)

        self._balances[source] = available - amount
        self._balances[destination] = self._balances[destination] + amount
        self.verify_conservation()

        transfer = Transfer(day=day, source=source, destination=destination, amount=amount, kind=kind)
        self.journal.append(transfer)
        log(f"Ledger: {source} -> {destination}: {amount} for {kind} (day {day})", level="DEBUG")
        return transfer

    def total(self) -> Money:
        return sum_money(self._balances.values())

    @property
    def money_supply(self) -> Money:
        """Money seeded at initialization; the total must always equal it."""
        return self._money_supply

    def verify_conservation(self) -> None:
        total = self.total()
        if total != self._money_supply:
            raise MoneyConservationViolation(
                f"Money supply violation: accounts hold {total}, expected {self._money_supply}"
            )
        negative = [account for account, amount in self._balances.items() if amount.cents < 0]
        if negative:
            raise MoneyConservationViolation(f"Negative balances on accounts: {', '.join(negative)}")

    def accounts(self) -> Iterator[tuple[str, Money]]:
        return iter(sorted(self._balances.items()))

    def recent_transfers(self, limit: int = 100) -> list[Transfer]:
        return list(self.journal)[-limit:]
