import math

import numpy as np
import pytest

from agents.business_agent import Business
from agents.government_agent import Government
from agents.labor_market import LaborMarket
from agents.market import Market
from agents.person_agent import Person
from config import SimulationConfig
from money import Money
from simulation.engine import (
    SimulationEngine,
    advance_one_day,
    initialize,
    make_random_source,
    query,
    run_day,
)


def run_days(config: SimulationConfig, days: int, seed: int = 7):
    rng = make_random_source(seed)
    state = initialize(config, rng)
    states = [state]
    for _ in range(days):
        state = advance_one_day(state, rng)
        states.append(state)
    return states


def test_initial_economy(small_config) -> None:
    state = initialize(small_config, np.random.default_rng(0))
    view = query(state)

    assert len(view.people) == 23
    assert len(view.businesses) == 6
    assert sum(len(b.staff) for b in view.businesses) == 18
    assert view.money_supply == Money.parse("347kCr")
    assert view.total_money == view.money_supply
    assert view.day == 0
    # Workers are hired from the poor first.
    assert all(p.wealth_class == "poor" for p in view.people if p.employer_id is not None)
    assert {b.owner_id for b in view.businesses} == {"person_21", "person_22", "person_23"}


def test_money_is_conserved_every_day(small_config) -> None:
    states = run_days(small_config, 60)

    supply = states[0].ledger.money_supply
    for state in states:
        assert state.ledger.total() == supply


def test_advancing_leaves_the_previous_state_untouched(small_config) -> None:
    rng = make_random_source(3)
    state = initialize(small_config, rng)
    for _ in range(5):
        state = advance_one_day(state, rng)
    before = query(state)

    later = advance_one_day(state, rng)

    assert query(state) == before
    assert later.day == state.day + 1


def test_same_seed_same_run(small_config) -> None:
    first = run_days(small_config, 20, seed=11)[-1]
    second = run_days(small_config, 20, seed=11)[-1]

    assert query(first) == query(second)


def test_business_creation_respects_the_gap(small_config) -> None:
    final = run_days(small_config, 120)[-1]

    created = sorted(b.created_day for b in final.businesses.values() if b.created_day > 0)
    assert created, "a rich person should have founded a business"
    previous = 0
    for day in created:
        assert day - previous >= small_config.government.min_time_between_business_creation.value
        previous = day


def test_daily_price_changes_are_bounded(small_config) -> None:
    states = run_days(small_config, 45)
    max_change = small_config.business.prices.max_change_per_day.value

    for yesterday, today in zip(states, states[1:]):
        for unique_id, business in yesterday.businesses.items():
            old = business.price.cents
            new = today.businesses[unique_id].price.cents
            assert abs(new - old) <= math.floor(old * max_change)
            assert new >= 1


def test_people_never_pay_the_government(small_config) -> None:
    config = small_config.override({"ledger_journal_size": 100_000})
    final = run_days(config, 60)[-1]

    government_id = final.government.unique_id
    for transfer in final.ledger.journal:
        if transfer.destination == government_id:
            assert transfer.source in final.businesses
            assert transfer.kind in {"tax", "liquidation"}


def test_run_day_mutates_in_place_and_returns_trades(small_config) -> None:
    rng = make_random_source(5)
    state = initialize(small_config, rng)

    trades = run_day(state, rng)

    assert state.day == 1
    assert state.trades_today == trades
    for trade in trades:
        assert trade.price.cents >= 1
        assert trade.quantity > 0


def test_market_activity_emerges(small_config) -> None:
    final = run_days(small_config, 10)[-1]

    assert final.market.last_prices, "some goods should have traded within ten days"
    assert any(p.utility > Money(0) for p in final.people.values())


def test_engine_runs_and_collects_metrics(small_config) -> None:
    config = small_config.override({"simulation_days": 5})
    engine = SimulationEngine(config, seed=1)

    view = engine.run()

    assert view.day == 5
    assert sorted(engine.collector.global_metrics) == [0, 1, 2, 3, 4, 5]


def test_agents_require_an_explicit_config(small_config) -> None:
    factories = [
        lambda: Market(),
        lambda: LaborMarket(),
        lambda: Government(),
        lambda: Person("person_1"),
        lambda: Business("business_1", small_config.production_cycles_by_name["farming"]),
    ]

    for factory in factories:
        with pytest.raises(TypeError):
            factory()
