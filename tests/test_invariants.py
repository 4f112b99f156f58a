import numpy as np
import pytest

from agents.market import SELL
from errors import InvariantViolation, MoneyConservationViolation
from money import Money
from simulation.engine import initialize
from simulation.invariants import check_invariants


@pytest.fixture
def state(small_config):
    return initialize(small_config, np.random.default_rng(0))


def test_fresh_state_holds_every_invariant(state) -> None:
    check_invariants(state)


def test_broken_employer_link_is_detected(state) -> None:
    worker_id = state.businesses["business_1"].staff[0]
    state.people[worker_id].employer_id = None

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def test_worker_on_two_staff_lists_is_detected(state) -> None:
    worker_id = state.businesses["business_1"].staff[0]
    state.businesses["business_2"].staff.append(worker_id)

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def test_negative_stock_is_detected(state) -> None:
    state.people["person_1"].stock["food"] = -1

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def test_sell_order_beyond_inventory_is_detected(state) -> None:
    state.market.place("business_1", SELL, "food", 5, Money.credits(8), current_day=0)

    with pytest.raises(InvariantViolation):
        check_invariants(state)


def test_created_money_is_detected(state) -> None:
    state.ledger._balances["person_1"] = state.ledger.balance("person_1") + Money(1)

    with pytest.raises(MoneyConservationViolation):
        check_invariants(state)
