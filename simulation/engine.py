from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field

import numpy as np

from agents.base_agent import agent_sort_key
from agents.business_agent import Business, resolve_bankruptcy
from agents.government_agent import Government
from agents.labor_market import LaborMarket
from agents.market import Market, Trade
from agents.person_agent import Person, WealthClass
from config import ProductionCycleConfig, SimulationConfig
from ledger import Ledger
from logger import log
from metrics import MetricsCollector
from money import Money
from names import generate_name
from sim_clock import is_month_end
from simulation.invariants import check_invariants
from simulation.views import SimulationView, build_view


def _format_duration(seconds: float) -> str:
    if seconds < 0 or seconds != seconds:  # NaN guard
        return "?"
    seconds_int = int(seconds)
    mins, secs = divmod(seconds_int, 60)
    hours, mins = divmod(mins, 60)
    if hours:
        return f"{hours:d}h{mins:02d}m{secs:02d}s"
    if mins:
        return f"{mins:d}m{secs:02d}s"
    return f"{secs:d}s"


def _progress_bar(done: int, total: int, width: int = 30) -> str:
    if total <= 0:
        return "[" + ("?" * width) + "]"
    ratio = max(0.0, min(1.0, done / total))
    filled = int(round(ratio * width))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


@dataclass
class SimulationState:
    """Everything that changes from one simulated day to the next."""

    config: SimulationConfig
    ledger: Ledger
    market: Market
    labor_market: LaborMarket
    government: Government
    people: dict[str, Person] = field(default_factory=dict)
    businesses: dict[str, Business] = field(default_factory=dict)
    day: int = 0
    next_business_index: int = 1
    trades_today: list[Trade] = field(default_factory=list)

    def people_in_order(self) -> list[Person]:
        return [self.people[k] for k in sorted(self.people, key=agent_sort_key)]

    def businesses_in_order(self) -> list[Business]:
        return [self.businesses[k] for k in sorted(self.businesses, key=agent_sort_key)]


def make_random_source(seed: int | None) -> np.random.Generator:
    """The single random stream every decision of a run draws from."""
    return np.random.default_rng(seed)


def _copy_state(state: SimulationState) -> SimulationState:
    # Configuration objects are immutable and shared between days.
    config = state.config
    memo: dict[int, object] = {id(config): config}
    for shared in (*config.people.needs, *config.business.production_cycles):
        memo[id(shared)] = shared
    return copy.deepcopy(state, memo)


# --- Initialization ---
def _create_people(state: SimulationState, rng: np.random.Generator) -> None:
    config = state.config
    init_people = config.init.people
    groups: list[tuple[WealthClass, int, Money]] = [
        ("poor", init_people.poor.value, init_people.poor_starting_money.value),
        ("rich", init_people.rich.value, init_people.rich_starting_money.value),
    ]
    index = 1
    for wealth_class, count, starting_money in groups:
        for _ in range(count):
            unique_id = f"{config.PERSON_ID_PREFIX}{index}"
            person = Person(unique_id, generate_name(rng), wealth_class, config=config)
            state.people[unique_id] = person
            state.ledger.open_account(unique_id, starting_money)
            state.labor_market.register_worker(person)
            index += 1


def _create_initial_businesses(state: SimulationState) -> None:
    config = state.config
    cycles = config.production_cycles_by_name
    people = state.people_in_order()
    owners = [p for p in people if p.wealth_class == "rich"] or people
    owner_index = 0

    for template in config.init.businesses:
        for copy_number in range(template.copies):
            unique_id = f"{config.BUSINESS_ID_PREFIX}{state.next_business_index}"
            state.next_business_index += 1
            owner_id = None
            if owners:
                owner_id = owners[owner_index % len(owners)].unique_id
                owner_index += 1
            name = template.name if template.copies == 1 else f"{template.name} #{copy_number + 1}"
            business = Business(
                unique_id,
                cycles[template.production_cycle],
                name=name,
                owner_id=owner_id,
                created_day=0,
                config=config,
            )
            state.businesses[unique_id] = business
            state.ledger.open_account(unique_id, template.money)

            unemployed = state.labor_market.unemployed()
            poor_first = sorted(
                unemployed, key=lambda w: (state.people[w.unique_id].wealth_class != "poor")
            )
            for worker in poor_first[: template.workers]:
                state.labor_market.hire(business, worker, business.salary, 0)


def initialize(config: SimulationConfig, rng: np.random.Generator) -> SimulationState:
    """
    Build the day-0 state: people, initial businesses and the government.

    All money in the run enters the ledger here.
    """
    state = SimulationState(
        config=config,
        ledger=Ledger(config.ledger_journal_size),
        market=Market(config=config),
        labor_market=LaborMarket(config=config),
        government=Government(config=config),
    )
    state.ledger.open_account(state.government.unique_id)
    _create_people(state, rng)
    _create_initial_businesses(state)
    log(
        f"Simulation initialized: {len(state.people)} people, {len(state.businesses)} businesses, "
        f"money supply {state.ledger.money_supply}.",
        level="INFO",
    )
    if config.check_invariants:
        check_invariants(state)
    return state


# --- Day phases ---
def _place_orders(state: SimulationState) -> None:
    day = state.day
    for business in state.businesses_in_order():
        business.list_output(state.market, day)
        business.order_inputs(state.market, state.ledger, day)
    for person in state.people_in_order():
        person.place_orders(state.market, state.ledger, day)


def _deliver(state: SimulationState, trades: list[Trade]) -> None:
    for trade in trades:
        seller = state.businesses.get(trade.seller_id)
        if seller is not None:
            seller.on_trade(trade)
        buyer = state.businesses.get(trade.buyer_id)
        if buyer is not None:
            buyer.on_trade(trade)
        elif trade.buyer_id in state.people:
            state.people[trade.buyer_id].receive_goods(trade.good, trade.quantity)


def _adjust_businesses(state: SimulationState) -> None:
    day = state.day
    config = state.config
    for business in state.businesses_in_order():
        if business.is_bankrupt:
            continue
        business.adjust_price(state.market, day)
        business.adjust_staff(state.labor_market, state.ledger, day)
        business.produce()
        solvency = business.pay_wages(state.people, state.labor_market, state.ledger, day)
        if solvency == "bankrupt":
            resolve_bankruptcy(
                business,
                state.market,
                state.ledger,
                state.government.unique_id,
                day,
                config.business.bankruptcy_resolution,
            )


def _most_demanded_cycle(state: SimulationState) -> ProductionCycleConfig:
    cycles = state.config.business.production_cycles
    return min(cycles, key=lambda c: (-state.market.unmet_demand(c.output_good), c.name))


def _create_business(state: SimulationState) -> Business | None:
    """Found a business for the richest person who can afford one, if the government allows it."""
    day = state.day
    ledger = state.ledger
    capital = state.config.business.money_to_create_business.value
    candidates = [p for p in state.people_in_order() if ledger.balance(p.unique_id) >= capital]
    if not candidates:
        return None
    owner = min(candidates, key=lambda p: (-ledger.balance(p.unique_id).cents, agent_sort_key(p.unique_id)))
    if not state.government.authorize_business_creation(day):
        return None

    cycle = _most_demanded_cycle(state)
    unique_id = f"{state.config.BUSINESS_ID_PREFIX}{state.next_business_index}"
    state.next_business_index += 1
    price = state.market.last_price(cycle.output_good) or cycle.initial_price
    business = Business(
        unique_id,
        cycle,
        name=f"{cycle.name.title()} {unique_id.rpartition('_')[2]}",
        owner_id=owner.unique_id,
        price=price,
        created_day=day,
        config=state.config,
    )
    ledger.open_account(unique_id)
    ledger.transfer(owner.unique_id, unique_id, capital, "business_creation", day)
    state.businesses[unique_id] = business
    business.logger.log_event(
        "business_created",
        {"owner": owner.unique_id, "production_cycle": cycle.name, "price": price, "day": day},
    )
    return business


def _government_phase(state: SimulationState) -> None:
    if is_month_end(state.day):
        state.government.settle_month(state.businesses_in_order(), state.ledger, state.day)
    _create_business(state)


def run_day(state: SimulationState, rng: np.random.Generator) -> list[Trade]:
    """
    Run every phase of the current day on ``state`` in place.

    Phases: expire orders, place orders, match, deliver and consume, adjust
    businesses, government, record statistics. The day counter advances last.
    """
    day = state.day
    state.market.expire(day)
    _place_orders(state)

    trades = state.market.match(day, rng, state.ledger)
    _deliver(state, trades)
    for person in state.people_in_order():
        person.consume(day)

    _adjust_businesses(state)
    _government_phase(state)

    state.labor_market.step(day)
    state.market.record_price_stats(day)
    state.trades_today = trades
    if state.config.check_invariants:
        check_invariants(state)
    state.day = day + 1
    return trades


def advance_one_day(state: SimulationState, rng: np.random.Generator) -> SimulationState:
    """
    Return the state one day later.

    The given state is left untouched, so an observer holding it always sees
    a complete day.
    """
    next_state = _copy_state(state)
    run_day(next_state, rng)
    return next_state


def query(state: SimulationState) -> SimulationView:
    return build_view(state)


class SimulationEngine:
    """Batch runner: advances a fresh state for ``simulation_days`` days and collects metrics."""

    def __init__(self, config: SimulationConfig, seed: int | None = None):
        self.config = config
        self.seed = config.seed if seed is None else seed
        self.reset()

    def reset(self) -> None:
        """Reset the simulation to its initial state."""
        self.rng = make_random_source(self.seed)
        self.state = initialize(self.config, self.rng)
        self.steps = int(self.config.simulation_days)
        self.collector = MetricsCollector(config=self.config)
        self.collector.collect(query(self.state))

        self.start_ts = time.time()
        self.progress_every_steps = max(1, self.steps // 10)

    def step(self) -> SimulationView:
        """Execute a single day of the simulation."""
        self.state = advance_one_day(self.state, self.rng)
        view = query(self.state)
        self.collector.collect(view)

        done = self.state.day
        if done % self.progress_every_steps == 0 or done == self.steps:
            elapsed = time.time() - self.start_ts
            eta = elapsed / done * (self.steps - done) if done else float("nan")
            log(
                f"Day {done}/{self.steps} {_progress_bar(done, self.steps)} "
                f"people {view.people_money}, businesses {view.business_money}, "
                f"treasury {view.government.treasury}, unemployment {view.unemployment_rate:.1%} "
                f"(elapsed {_format_duration(elapsed)}, eta {_format_duration(eta)})",
                level="INFO",
            )
        return view

    def run(self) -> SimulationView:
        """Run the full simulation."""
        log(f"Starting simulation for {self.steps} days...", level="INFO")
        view = query(self.state)
        for _ in range(self.steps):
            view = self.step()
        log("Simulation finished.", level="INFO")
        return view
