# business_agent.py
"""
Businesses run one production cycle each: they buy inputs, employ people,
produce output and sell it on the market.

Daily adjustment order: pricing, staffing, production, wages (which also
decides solvency). Bankrupt businesses are inert.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Literal, TypeAlias

from config import ProductionCycleConfig, SimulationConfig
from errors import InvalidOrder
from ledger import Ledger
from logger import log
from money import ZERO, Money

from .base_agent import BaseAgent
from .labor_market import LaborMarket
from .market import BUY, SELL, Market, Trade

if TYPE_CHECKING:
    from .person_agent import Person

Solvency: TypeAlias = Literal["solvent", "stressed", "bankrupt"]

# Cash a business needs on hand before it takes on another worker.
HIRING_RESERVE_DAYS = 30
MIN_PRICE = Money(1)


class Business(BaseAgent):
    """
    A producer running a single production cycle.

    Money is held in the ledger under the business's unique id; everything
    else (inventory, staff, price, solvency) lives on the agent.
    """

    agent_type = "Business"

    def __init__(
        self,
        unique_id: str,
        production_cycle: ProductionCycleConfig,
        name: str | None = None,
        owner_id: str | None = None,
        price: Money | None = None,
        created_day: int = 0,
        *,
        config: SimulationConfig,
    ) -> None:
        """
        Initialize a business.

        Args:
            unique_id: Unique identifier, also the ledger account id
            production_cycle: The cycle this business runs
            name: Display name
            owner_id: Person receiving dividends (None for ownerless businesses)
            price: Starting price of the output (defaults to the cycle's initial price)
            created_day: Day the business was founded
            config: Simulation configuration
        """
        super().__init__(unique_id, name)
        self.config: SimulationConfig = config
        business_config = self.config.business

        self.owner_id: str | None = owner_id
        self.production_cycle: ProductionCycleConfig = production_cycle
        self.created_day: int = created_day
        self.price: Money = price if price is not None else production_cycle.initial_price
        self.inventory: dict[str, int] = {}

        # Staffing
        self.staff: list[str] = []
        self.salary: Money = business_config.new_worker_salary.value
        self.last_staff_change_day: int | None = None
        self.min_days_between_staff_change: int = business_config.min_days_between_staff_change.value
        self.production_goal_cycles: int = business_config.goal_produced_cycles_count.value
        self.keep_resources_for_cycles: int = business_config.keep_resources_for_cycles_amount.value

        # Pricing
        self.max_price_change: float = business_config.prices.max_change_per_day.value
        self.sales_history: deque[int] = deque(maxlen=business_config.prices.sell_history_to_consider.value)
        self.sold_today: int = 0

        # Accounting for the current month
        self.monthly_dividend: float = business_config.monthly_dividend.value
        self.period_revenue: Money = ZERO
        self.period_costs: Money = ZERO
        self.last_period_profit: Money = ZERO
        self.cycles_produced_total: int = 0

        self.solvency: Solvency = "solvent"
        self.bankrupt_day: int | None = None

    # --- Derived values ---
    @property
    def output_good(self) -> str:
        return self.production_cycle.output_good

    @property
    def is_bankrupt(self) -> bool:
        return self.solvency == "bankrupt"

    @property
    def output_stock(self) -> int:
        return self.inventory.get(self.output_good, 0)

    def cycles_per_day(self) -> int:
        """Cycles the current staff can run in a day, ignoring inputs."""
        return len(self.staff) // self.production_cycle.workdays_needed

    def input_limit_price(self) -> Money:
        """Half of the output value a single input unit contributes to."""
        total_inputs = sum(self.production_cycle.inputs.values())
        if total_inputs <= 0:
            return ZERO
        return self.price * self.production_cycle.output_units // total_inputs // 2

    def period_profit(self) -> Money:
        return self.period_revenue - self.period_costs

    # --- Market phase ---
    def list_output(self, market: Market, current_day: int) -> int:
        """
        Offer every unit of output that is not already listed.

        Returns:
            Units newly listed
        """
        if self.is_bankrupt:
            return 0
        unlisted = self.output_stock - market.outstanding(self.unique_id, SELL, self.output_good)
        if unlisted <= 0:
            return 0
        market.place(self.unique_id, SELL, self.output_good, unlisted, self.price, current_day)
        return unlisted

    def order_inputs(self, market: Market, ledger: Ledger, current_day: int) -> int:
        """
        Order missing production inputs to keep a few cycles of stock.

        Returns:
            Units ordered across all inputs
        """
        if self.is_bankrupt or not self.production_cycle.inputs:
            return 0
        limit_price = self.input_limit_price()
        cycles_to_keep = self.keep_resources_for_cycles * max(1, self.cycles_per_day())
        ordered = 0
        for good in sorted(self.production_cycle.inputs):
            per_cycle = self.production_cycle.inputs[good]
            held = self.inventory.get(good, 0) + market.outstanding(self.unique_id, BUY, good)
            missing = cycles_to_keep * per_cycle - held
            if missing <= 0:
                continue
            free = ledger.balance(self.unique_id) - market.reserved_funds(self.unique_id)
            if limit_price.cents > 0:
                missing = min(missing, max(0, free.cents) // limit_price.cents)
            if missing <= 0:
                continue
            try:
                market.place(self.unique_id, BUY, good, missing, limit_price, current_day)
            except InvalidOrder as exc:
                self.logger.debug(f"Input order for {good} rejected: {exc}")
                continue
            ordered += missing
        return ordered

    def on_trade(self, trade: Trade) -> None:
        """Book a trade this business took part in and move the goods."""
        if trade.seller_id == self.unique_id:
            self.inventory[trade.good] = self.inventory.get(trade.good, 0) - trade.quantity
            self.sold_today += trade.quantity
            self.period_revenue = self.period_revenue + trade.value
        if trade.buyer_id == self.unique_id:
            self.inventory[trade.good] = self.inventory.get(trade.good, 0) + trade.quantity
            self.period_costs = self.period_costs + trade.value

    # --- Adjustment phase ---
    def adjust_price(self, market: Market, current_day: int) -> Money:
        """
        Move the output price by at most ``max_price_change`` of itself.

        Sales over the trailing window that exceed what is still listed count
        as extreme demand and raise the price by the full step. Otherwise the
        price follows the stock gap toward ``keep_resources_for_cycles`` cycles
        of output: overstock lowers it, understock raises it.

        Returns:
            The new price
        """
        self.sales_history.append(self.sold_today)
        self.sold_today = 0
        if self.is_bankrupt:
            return self.price

        old_price = self.price
        max_step = math.floor(old_price.cents * self.max_price_change)
        listed = market.outstanding(self.unique_id, SELL, self.output_good)

        if sum(self.sales_history) > listed:
            change = max_step
        else:
            target = self.keep_resources_for_cycles * self.production_cycle.output_units
            gap = (target - self.output_stock) / target
            change = max(-max_step, min(max_step, round(old_price.cents * gap)))

        self.price = max(MIN_PRICE, Money(old_price.cents + change))
        if self.price != old_price:
            log(
                f"Business {self.unique_id}: price of {self.output_good} {old_price} -> {self.price} "
                f"on day {current_day}.",
                level="DEBUG",
            )
        return self.price

    def staff_change_allowed(self, current_day: int) -> bool:
        if self.last_staff_change_day is None:
            return True
        return current_day - self.last_staff_change_day >= self.min_days_between_staff_change

    def adjust_staff(
        self,
        labor_market: LaborMarket,
        ledger: Ledger,
        current_day: int,
    ) -> int:
        """
        Hire or fire at most one worker, honouring the staffing cooldown.

        The backlog is the business's own unsold output, listed or not. Above
        ``production_goal_cycles`` cycles of it there are too many hands;
        below it the business hires the first unemployed person if it can
        fund ``HIRING_RESERVE_DAYS`` days of wages for the larger staff.

        Returns:
            +1 for a hire, -1 for a fire, 0 otherwise
        """
        if self.is_bankrupt or not self.staff_change_allowed(current_day):
            return 0

        threshold = self.production_goal_cycles * self.production_cycle.output_units
        unsold = self.output_stock
        if unsold > threshold and self.staff:
            worker = labor_market.registered_workers[self.staff[-1]]
            labor_market.release(self, worker, current_day)
            return -1
        if unsold < threshold:
            candidates = labor_market.unemployed()
            if not candidates:
                return 0
            reserve = self.salary * ((len(self.staff) + 1) * HIRING_RESERVE_DAYS)
            if ledger.balance(self.unique_id) < reserve:
                return 0
            labor_market.hire(self, candidates[0], self.salary, current_day)
            return 1
        return 0

    def produce(self) -> int:
        """
        Run as many cycles as staff and inputs allow.

        Returns:
            Cycles completed
        """
        if self.is_bankrupt:
            return 0
        cycles = self.cycles_per_day()
        for good, per_cycle in self.production_cycle.inputs.items():
            cycles = min(cycles, self.inventory.get(good, 0) // per_cycle)
        if cycles <= 0:
            return 0
        for good, per_cycle in self.production_cycle.inputs.items():
            self.inventory[good] -= cycles * per_cycle
        self.inventory[self.output_good] = self.output_stock + cycles * self.production_cycle.output_units
        self.cycles_produced_total += cycles
        return cycles

    def wages_due(self, people: Mapping[str, Person]) -> Money:
        return sum((people[worker_id].salary for worker_id in self.staff), ZERO)

    def pay_wages(
        self,
        people: Mapping[str, Person],
        labor_market: LaborMarket,
        ledger: Ledger,
        current_day: int,
    ) -> Solvency:
        """
        Pay the day's wages and update solvency.

        When the balance does not cover all wages, the newest hires are let go
        (ignoring the staffing cooldown) until it does. A business that cannot
        pay even one worker goes bankrupt.

        Returns:
            The solvency after paying
        """
        if self.is_bankrupt:
            return self.solvency

        balance = ledger.balance(self.unique_id)
        stressed = False
        while self.staff and balance < self.wages_due(people):
            stressed = True
            worker = people[self.staff[-1]]
            labor_market.release(self, worker, current_day, counts_as_staff_change=False)
            self.logger.warning(f"Insolvent: released {worker.unique_id} on day {current_day}")

        if stressed and not self.staff:
            self._set_solvency("bankrupt", "cannot pay a single worker")
            self.bankrupt_day = current_day
            return self.solvency

        for worker_id in self.staff:
            salary = people[worker_id].salary
            ledger.transfer(self.unique_id, worker_id, salary, "salary", current_day)
            self.period_costs = self.period_costs + salary

        if stressed:
            self._set_solvency("stressed", "wages exceeded balance")
        elif self.solvency == "stressed":
            self._set_solvency("solvent", "wages covered again")
        return self.solvency

    def _set_solvency(self, new_state: Solvency, reason: str) -> None:
        if new_state == self.solvency:
            return
        self.logger.log_state_change(self.solvency, new_state, reason)
        self.solvency = new_state

    # --- Month end ---
    def pay_dividend(self, after_tax_profit: Money, ledger: Ledger, current_day: int) -> Money:
        """
        Pay ``monthly_dividend`` of the after-tax profit to the owner.

        Returns:
            The amount paid (zero without an owner or profit)
        """
        if self.owner_id is None or after_tax_profit.cents <= 0:
            return ZERO
        amount = min(after_tax_profit * self.monthly_dividend, ledger.balance(self.unique_id))
        if amount.cents <= 0:
            return ZERO
        ledger.transfer(self.unique_id, self.owner_id, amount, "dividend", current_day)
        self.logger.log_financial_transaction("dividend", amount, ledger.balance(self.unique_id))
        return amount

    def close_period(self) -> Money:
        """Reset monthly revenue and costs, returning the closed period's profit."""
        self.last_period_profit = self.period_profit()
        self.period_revenue = ZERO
        self.period_costs = ZERO
        return self.last_period_profit


# --- Bankruptcy resolution ---
BankruptcyResolution: TypeAlias = Callable[[Business, Market, Ledger, str, int], None]


def freeze_business(business: Business, market: Market, ledger: Ledger, government_id: str, current_day: int) -> None:
    """Keep the business and its balance, but take it off the market."""
    cancelled = market.cancel_orders_of(business.unique_id)
    log(
        f"Business {business.unique_id} frozen after bankruptcy on day {current_day} "
        f"({len(cancelled)} orders cancelled).",
        level="INFO",
    )


def liquidate_business(
    business: Business, market: Market, ledger: Ledger, government_id: str, current_day: int
) -> None:
    """Take the business off the market and hand its remaining money to the owner (or the state)."""
    market.cancel_orders_of(business.unique_id)
    beneficiary = business.owner_id or government_id
    remaining = ledger.balance(business.unique_id)
    if remaining.cents > 0:
        ledger.transfer(business.unique_id, beneficiary, remaining, "liquidation", current_day)
    log(
        f"Business {business.unique_id} liquidated on day {current_day}: {remaining} paid to {beneficiary}.",
        level="INFO",
    )


BANKRUPTCY_RESOLUTIONS: dict[str, BankruptcyResolution] = {
    "freeze": freeze_business,
    "liquidate": liquidate_business,
}


def resolve_bankruptcy(
    business: Business,
    market: Market,
    ledger: Ledger,
    government_id: str,
    current_day: int,
    strategy: str = "freeze",
) -> None:
    try:
        resolution = BANKRUPTCY_RESOLUTIONS[strategy]
    except KeyError:
        raise ValueError(f"Unknown bankruptcy resolution {strategy!r}") from None
    resolution(business, market, ledger, government_id, current_day)
