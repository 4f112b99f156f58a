"""Standing invariants checked after every simulated day."""

from __future__ import annotations

from typing import TYPE_CHECKING

from errors import InvariantViolation

if TYPE_CHECKING:
    from simulation.engine import SimulationState


def check_money_conservation(state: SimulationState) -> None:
    # Raises MoneyConservationViolation itself.
    state.ledger.verify_conservation()


def check_employment_links(state: SimulationState) -> None:
    """Every employed person appears in exactly their employer's staff list and vice versa."""
    staff_of: dict[str, str] = {}
    for business in state.businesses.values():
        if len(set(business.staff)) != len(business.staff):
            raise InvariantViolation(f"Business {business.unique_id} lists a worker twice")
        for worker_id in business.staff:
            if worker_id in staff_of:
                raise InvariantViolation(
                    f"Person {worker_id} is staff of both {staff_of[worker_id]} and {business.unique_id}"
                )
            staff_of[worker_id] = business.unique_id

    for person in state.people.values():
        listed_at = staff_of.get(person.unique_id)
        if person.employer_id != listed_at:
            raise InvariantViolation(
                f"Person {person.unique_id} works for {person.employer_id} "
                f"but is listed as staff of {listed_at}"
            )


def check_goods(state: SimulationState) -> None:
    for person in state.people.values():
        for good, units in person.stock.items():
            if units < 0:
                raise InvariantViolation(f"Person {person.unique_id} holds {units} {good}")
    for business in state.businesses.values():
        for good, units in business.inventory.items():
            if units < 0:
                raise InvariantViolation(f"Business {business.unique_id} holds {units} {good}")
        if business.price.cents < 1:
            raise InvariantViolation(f"Business {business.unique_id} has non-positive price {business.price}")


def check_orders(state: SimulationState) -> None:
    for order in state.market.all_orders():
        if order.quantity <= 0:
            raise InvariantViolation(f"Order #{order.order_id} has remaining quantity {order.quantity}")
        if order.limit_price.cents <= 0:
            raise InvariantViolation(f"Order #{order.order_id} has limit price {order.limit_price}")
        if order.side == "sell":
            seller = state.businesses.get(order.owner_id)
            if seller is not None and order.quantity > seller.inventory.get(order.good, 0):
                raise InvariantViolation(
                    f"Order #{order.order_id} offers more {order.good} than {order.owner_id} holds"
                )


def check_invariants(state: SimulationState) -> None:
    """
    Verify every standing invariant of a simulation state.

    Raises:
        MoneyConservationViolation: If money was created or destroyed
        InvariantViolation: If any other invariant does not hold
    """
    check_money_conservation(state)
    check_employment_links(state)
    check_goods(state)
    check_orders(state)
