"""Read-only snapshots of the simulation state for observers.

Views are frozen dataclasses with read-only mappings, so handing them to a UI,
the metrics collector or a test can never change the running simulation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from agents.base_agent import agent_sort_key
from agents.market import PriceStats, Trade
from money import Money, sum_money

if TYPE_CHECKING:
    from simulation.engine import SimulationState


@dataclass(frozen=True)
class PersonView:
    unique_id: str
    name: str
    wealth_class: str
    money: Money
    employer_id: str | None
    salary: Money
    stock: Mapping[str, int]
    utility: Money
    orders_placed_today: int
    standing_buy_orders: tuple[int, ...]


@dataclass(frozen=True)
class BusinessView:
    unique_id: str
    name: str
    owner_id: str | None
    production_cycle: str
    output_good: str
    money: Money
    price: Money
    staff: tuple[str, ...]
    inventory: Mapping[str, int]
    solvency: str
    created_day: int
    last_staff_change_day: int | None
    period_revenue: Money
    period_costs: Money
    last_period_profit: Money


@dataclass(frozen=True)
class OrderView:
    order_id: int
    good: str
    owner_id: str
    side: str
    quantity: int
    limit_price: Money
    placed_day: int
    expires_day: int


@dataclass(frozen=True)
class MarketView:
    orders: tuple[OrderView, ...]
    trades_today: tuple[Trade, ...]
    last_prices: Mapping[str, Money]
    price_stats: Mapping[str, PriceStats]

    def orders_for(self, good: str) -> tuple[OrderView, ...]:
        return tuple(o for o in self.orders if o.good == good)


@dataclass(frozen=True)
class GovernmentView:
    unique_id: str
    treasury: Money
    cit: float
    pit: float
    last_business_creation_day: int
    min_time_between_business_creation: int
    cit_collected_total: Money


@dataclass(frozen=True)
class SimulationView:
    day: int
    people: tuple[PersonView, ...]
    businesses: tuple[BusinessView, ...]
    market: MarketView
    government: GovernmentView
    total_money: Money
    money_supply: Money
    unemployment_rate: float

    @property
    def people_money(self) -> Money:
        return sum_money(p.money for p in self.people)

    @property
    def business_money(self) -> Money:
        return sum_money(b.money for b in self.businesses)

    def person(self, unique_id: str) -> PersonView:
        for view in self.people:
            if view.unique_id == unique_id:
                return view
        raise KeyError(unique_id)

    def business(self, unique_id: str) -> BusinessView:
        for view in self.businesses:
            if view.unique_id == unique_id:
                return view
        raise KeyError(unique_id)

    def businesses_by_solvency(self) -> dict[str, int]:
        counts = {"solvent": 0, "stressed": 0, "bankrupt": 0}
        for view in self.businesses:
            counts[view.solvency] += 1
        return counts


def build_view(state: SimulationState) -> SimulationView:
    ledger = state.ledger
    people = tuple(
        PersonView(
            unique_id=p.unique_id,
            name=p.name,
            wealth_class=p.wealth_class,
            money=ledger.balance(p.unique_id),
            employer_id=p.employer_id,
            salary=p.salary,
            stock=MappingProxyType(dict(p.stock)),
            utility=p.utility,
            orders_placed_today=p.orders_placed_today,
            standing_buy_orders=tuple(p.standing_buy_orders),
        )
        for p in (state.people[k] for k in sorted(state.people, key=agent_sort_key))
    )
    businesses = tuple(
        BusinessView(
            unique_id=b.unique_id,
            name=b.name,
            owner_id=b.owner_id,
            production_cycle=b.production_cycle.name,
            output_good=b.output_good,
            money=ledger.balance(b.unique_id),
            price=b.price,
            staff=tuple(b.staff),
            inventory=MappingProxyType(dict(b.inventory)),
            solvency=b.solvency,
            created_day=b.created_day,
            last_staff_change_day=b.last_staff_change_day,
            period_revenue=b.period_revenue,
            period_costs=b.period_costs,
            last_period_profit=b.last_period_profit,
        )
        for b in (state.businesses[k] for k in sorted(state.businesses, key=agent_sort_key))
    )
    market = state.market
    market_view = MarketView(
        orders=tuple(
            OrderView(
                order_id=o.order_id,
                good=o.good,
                owner_id=o.owner_id,
                side=o.side,
                quantity=o.quantity,
                limit_price=o.limit_price,
                placed_day=o.placed_day,
                expires_day=o.expires_day,
            )
            for o in market.all_orders()
        ),
        trades_today=tuple(state.trades_today),
        last_prices=MappingProxyType(dict(market.last_prices)),
        price_stats=MappingProxyType(
            {good: history[-1] for good, history in market.price_history.items() if history}
        ),
    )
    government = state.government
    government_view = GovernmentView(
        unique_id=government.unique_id,
        treasury=ledger.balance(government.unique_id),
        cit=government.cit,
        pit=government.pit,
        last_business_creation_day=government.last_business_creation_day,
        min_time_between_business_creation=government.min_time_between_business_creation,
        cit_collected_total=government.cit_collected_total,
    )
    return SimulationView(
        day=state.day,
        people=people,
        businesses=businesses,
        market=market_view,
        government=government_view,
        total_money=ledger.total(),
        money_supply=ledger.money_supply,
        unemployment_rate=state.labor_market.compute_unemployment_rate(),
    )
