# person_agent.py
"""
People: consumers and workers.

A person values a unit of a good by the discounted utility of consuming it
later. Units already held or on order push the next unit's consumption further
into the future, so each additional unit is worth a little less.
"""

from __future__ import annotations

from typing import Literal, TypeAlias

from config import NeedConfig, SimulationConfig
from errors import InvalidOrder
from ledger import Ledger
from money import ZERO, Money

from .base_agent import BaseAgent
from .market import BUY, Market

WealthClass: TypeAlias = Literal["poor", "rich"]

DAYS_PER_DISCOUNT_PERIOD = 30


class Person(BaseAgent):
    """A consumer who may also be employed by a business."""

    agent_type = "Person"

    def __init__(
        self,
        unique_id: str,
        name: str | None = None,
        wealth_class: WealthClass = "poor",
        *,
        config: SimulationConfig,
    ) -> None:
        super().__init__(unique_id, name)
        self.config: SimulationConfig = config
        self.wealth_class: WealthClass = wealth_class

        people_config = self.config.people
        self.discount_rate: float = people_config.discount_rate.value
        self.max_buy_orders_per_day: int = people_config.max_buy_orders_per_day.value
        self.needs: list[NeedConfig] = list(people_config.needs)

        # Employment
        self.employer_id: str | None = None
        self.salary: Money = ZERO

        # Goods and consumption
        self.stock: dict[str, int] = {}
        self.utility: Money = ZERO
        self.orders_placed_today: int = 0
        self.standing_buy_orders: list[int] = []

    @property
    def employed(self) -> bool:
        return self.employer_id is not None

    def start_day(self) -> None:
        self.orders_placed_today = 0

    def discounted_utility(self, need: NeedConfig, days_ahead: float) -> Money:
        """
        Present value of consuming one unit of a need ``days_ahead`` days from now.

        Args:
            need: The need the unit satisfies
            days_ahead: How far in the future the unit would be consumed

        Returns:
            ``base_utility * discount_rate ** (days_ahead / 30)``
        """
        return need.base_utility * (self.discount_rate ** (days_ahead / DAYS_PER_DISCOUNT_PERIOD))

    def next_unit_value(self, need: NeedConfig, market: Market) -> Money:
        held = self.stock.get(need.good, 0) + market.outstanding(self.unique_id, BUY, need.good)
        return self.discounted_utility(need, held * need.consumption_interval_days)

    def free_funds(self, market: Market, ledger: Ledger) -> Money:
        """Balance not already committed to live buy orders."""
        return ledger.balance(self.unique_id) - market.reserved_funds(self.unique_id)

    def place_orders(self, market: Market, ledger: Ledger, current_day: int) -> int:
        """
        Place up to ``max_buy_orders_per_day`` single-unit buy orders.

        Every order goes to the need whose next unit is currently worth most
        (ties by good name). A need the person cannot afford, or whose order
        the market rejects, is skipped for the rest of the day and the next
        most valuable need is tried. Only the daily quota ends the day early.

        Returns:
            Number of orders placed today
        """
        self.start_day()
        self.standing_buy_orders = [o.order_id for o in market.orders_of(self.unique_id, BUY)]
        candidates = list(self.needs)

        while candidates and self.orders_placed_today < self.max_buy_orders_per_day:
            limit_price, need = min(
                ((self.next_unit_value(need, market), need) for need in candidates),
                key=lambda item: (-item[0].cents, item[1].good),
            )
            if self.free_funds(market, ledger) < limit_price:
                self.logger.debug(f"Not enough free funds for {need.good} @ {limit_price}")
                candidates.remove(need)
                continue
            try:
                order = market.place(self.unique_id, BUY, need.good, 1, limit_price, current_day)
            except InvalidOrder as exc:
                self.logger.debug(f"Buy order for {need.good} rejected: {exc}")
                candidates.remove(need)
                continue
            self.orders_placed_today += 1
            self.standing_buy_orders.append(order.order_id)

        return self.orders_placed_today

    def receive_goods(self, good: str, quantity: int) -> None:
        self.stock[good] = self.stock.get(good, 0) + quantity

    def consume(self, current_day: int) -> int:
        """Consume one unit of every need that is due today and held in stock."""
        consumed = 0
        for need in self.needs:
            if current_day % need.consumption_interval_days != 0:
                continue
            if self.stock.get(need.good, 0) <= 0:
                continue
            self.stock[need.good] -= 1
            self.utility = self.utility + need.base_utility
            consumed += 1
        return consumed
