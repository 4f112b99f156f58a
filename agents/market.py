# market.py
"""
Double-auction order book with per-good books.

Buyers only ever see a random subset of the live sell orders and pick one of
the cheapest few of those, so prices are discovered with partial information.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

import numpy as np

from config import SimulationConfig
from errors import InvalidOrder
from ledger import Ledger
from logger import log
from money import Money, sum_money

from .base_agent import BaseAgent

Side: TypeAlias = Literal["buy", "sell"]
BUY: Side = "buy"
SELL: Side = "sell"

# Guards ceil() against float noise such as 30 * 0.1 == 3.0000000000000004
_FRACTION_EPSILON = 1e-9


@dataclass
class Order:
    """A standing offer to buy or sell a quantity of a good."""

    good: str
    owner_id: str
    side: Side
    quantity: int
    limit_price: Money
    placed_day: int
    expires_day: int
    order_id: int = -1

    def is_live(self, current_day: int) -> bool:
        return current_day < self.expires_day and self.quantity > 0


@dataclass(frozen=True)
class Trade:
    day: int
    good: str
    buyer_id: str
    seller_id: str
    quantity: int
    price: Money
    buy_order_id: int
    sell_order_id: int

    @property
    def value(self) -> Money:
        return self.price * self.quantity


@dataclass(frozen=True)
class PriceStats:
    """Distribution of live sell prices of one good on one day."""

    good: str
    day: int
    min: Money
    p25: Money
    median: Money
    p75: Money
    max: Money
    avg: Money
    total_orders: int


@dataclass
class OrderBook:
    buys: list[Order] = field(default_factory=list)
    sells: list[Order] = field(default_factory=list)

    def side(self, side: Side) -> list[Order]:
        return self.buys if side == BUY else self.sells


def _fraction_count(total: int, fraction: float) -> int:
    """ceil(total * fraction), at least 1 and at most total (total > 0)."""
    count = math.ceil(total * fraction - _FRACTION_EPSILON)
    return min(total, max(1, count))


class Market(BaseAgent):
    """
    Holds live buy and sell orders per good and matches them once per day.

    Handles:
    - Validation and id assignment of submitted orders
    - Expiry of stale orders before matching
    - Randomized partial-information matching with ledger settlement
    - Trade and price history
    """

    agent_type = "Market"

    def __init__(self, unique_id: str = "market", *, config: SimulationConfig) -> None:
        super().__init__(unique_id)
        self.config: SimulationConfig = config

        market_config = self.config.business.market
        self.sell_orders_seen: float = market_config.amount_of_sell_orders_seen.value
        self.best_price_fraction: float = market_config.amount_of_sell_orders_to_choose_best_price_from.value
        self.order_expiration_time: int = market_config.order_expiration_time.value

        self.books: dict[str, OrderBook] = {}
        self._next_order_id: int = 0
        self.trade_history: deque[Trade] = deque(maxlen=self.config.trade_history_size)
        self.price_history: dict[str, deque[PriceStats]] = {}
        self.last_prices: dict[str, Money] = {}

    # --- Order entry ---
    def submit(self, order: Order) -> Order:
        """
        Validate and append an order to its book.

        Returns:
            The order, now carrying its assigned order id

        Raises:
            InvalidOrder: If quantity or limit price is not positive
        """
        if order.quantity <= 0:
            raise InvalidOrder(f"Order quantity must be positive, got {order.quantity}")
        if order.limit_price.cents <= 0:
            raise InvalidOrder(f"Order limit price must be positive, got {order.limit_price}")
        if order.side not in (BUY, SELL):
            raise InvalidOrder(f"Unknown order side {order.side!r}")

        order.order_id = self._next_order_id
        self._next_order_id += 1
        self.books.setdefault(order.good, OrderBook()).side(order.side).append(order)
        log(
            f"Market: {order.owner_id} placed {order.side} order #{order.order_id} for "
            f"{order.quantity} {order.good} @ {order.limit_price} (expires day {order.expires_day}).",
            level="DEBUG",
        )
        return order

    def place(
        self,
        owner_id: str,
        side: Side,
        good: str,
        quantity: int,
        limit_price: Money,
        current_day: int,
    ) -> Order:
        """Create an order that expires after the configured lifetime and submit it."""
        order = Order(
            good=good,
            owner_id=owner_id,
            side=side,
            quantity=quantity,
            limit_price=limit_price,
            placed_day=current_day,
            expires_day=current_day + self.order_expiration_time,
        )
        return self.submit(order)

    # --- Maintenance ---
    def expire(self, current_day: int) -> list[Order]:
        """Remove every order with expires_day <= current_day and return them."""
        expired: list[Order] = []
        for book in self.books.values():
            for side in (BUY, SELL):
                orders = book.side(side)
                keep = [o for o in orders if o.expires_day > current_day]
                if len(keep) != len(orders):
                    expired.extend(o for o in orders if o.expires_day <= current_day)
                    orders[:] = keep
        if expired:
            log(f"Market: {len(expired)} orders expired on day {current_day}.", level="DEBUG")
        return expired

    def cancel_orders_of(self, owner_id: str) -> list[Order]:
        cancelled: list[Order] = []
        for book in self.books.values():
            for side in (BUY, SELL):
                orders = book.side(side)
                cancelled.extend(o for o in orders if o.owner_id == owner_id)
                orders[:] = [o for o in orders if o.owner_id != owner_id]
        return cancelled

    # --- Matching ---
    def match(self, current_day: int, rng: np.random.Generator, ledger: Ledger) -> list[Trade]:
        """
        Match buy orders against sell orders for every good.

        Goods are processed in name order and buy orders by ascending order id,
        so the result only depends on the order flow and the random stream.
        A buy order that finds no acceptable seller simply stays on the book.

        Returns:
            Trades executed during this pass, in execution order
        """
        trades: list[Trade] = []
        for good in sorted(self.books):
            book = self.books[good]
            for buy in book.buys:
                if not buy.is_live(current_day):
                    continue
                trade = self._match_buy_order(buy, book, current_day, rng, ledger)
                if trade is not None:
                    trades.append(trade)
            book.buys[:] = [o for o in book.buys if o.quantity > 0]
            book.sells[:] = [o for o in book.sells if o.quantity > 0]

        self.trade_history.extend(trades)
        if trades:
            log(f"Market: {len(trades)} trades executed on day {current_day}.", level="INFO")
        return trades

    def _match_buy_order(
        self,
        buy: Order,
        book: OrderBook,
        current_day: int,
        rng: np.random.Generator,
        ledger: Ledger,
    ) -> Trade | None:
        candidates = [
            s for s in book.sells if s.is_live(current_day) and s.owner_id != buy.owner_id
        ]
        if not candidates:
            return None

        sell = self._choose_sell_order(candidates, rng)
        if sell.limit_price > buy.limit_price:
            return None

        quantity = min(buy.quantity, sell.quantity)
        affordable = ledger.balance(buy.owner_id).cents // sell.limit_price.cents
        quantity = min(quantity, affordable)
        if quantity <= 0:
            log(
                f"Market: {buy.owner_id} cannot afford {buy.good} @ {sell.limit_price}.",
                level="DEBUG",
            )
            return None

        ledger.transfer(buy.owner_id, sell.owner_id, sell.limit_price * quantity, "trade", current_day)
        buy.quantity -= quantity
        sell.quantity -= quantity
        self.last_prices[buy.good] = sell.limit_price

        return Trade(
            day=current_day,
            good=buy.good,
            buyer_id=buy.owner_id,
            seller_id=sell.owner_id,
            quantity=quantity,
            price=sell.limit_price,
            buy_order_id=buy.order_id,
            sell_order_id=sell.order_id,
        )

    def _choose_sell_order(self, candidates: list[Order], rng: np.random.Generator) -> Order:
        """Sample the visible sell orders, then pick among the cheapest of them."""
        seen = _fraction_count(len(candidates), self.sell_orders_seen)
        indices = sorted(int(i) for i in rng.choice(len(candidates), size=seen, replace=False))
        visible = sorted((candidates[i] for i in indices), key=lambda o: (o.limit_price, o.order_id))
        shortlist = _fraction_count(len(visible), self.best_price_fraction)
        return visible[int(rng.integers(shortlist))]

    # --- Queries ---
    def orders_of(self, owner_id: str, side: Side | None = None, good: str | None = None) -> list[Order]:
        goods = sorted(self.books) if good is None else [good]
        books = [self.books[g] for g in goods if g in self.books]
        sides = (side,) if side is not None else (BUY, SELL)
        return [o for book in books for s in sides for o in book.side(s) if o.owner_id == owner_id]

    def outstanding(self, owner_id: str, side: Side, good: str) -> int:
        """Remaining quantity on the owner's live orders of one side for one good."""
        return sum(o.quantity for o in self.orders_of(owner_id, side, good))

    def reserved_funds(self, owner_id: str) -> Money:
        """Money the owner has committed through live buy orders (limit x remaining quantity)."""
        return sum_money(o.limit_price * o.quantity for o in self.orders_of(owner_id, BUY))

    def total_volume(self, side: Side, good: str) -> int:
        book = self.books.get(good)
        if book is None:
            return 0
        return sum(o.quantity for o in book.side(side))

    def unmet_demand(self, good: str) -> int:
        return self.total_volume(BUY, good) - self.total_volume(SELL, good)

    def last_price(self, good: str) -> Money | None:
        return self.last_prices.get(good)

    def all_orders(self) -> list[Order]:
        return [
            o
            for good in sorted(self.books)
            for side in (BUY, SELL)
            for o in self.books[good].side(side)
        ]

    # --- Statistics ---
    def record_price_stats(self, current_day: int) -> dict[str, PriceStats]:
        """Append today's sell price distribution per good to the price history."""
        recorded: dict[str, PriceStats] = {}
        for good in sorted(self.books):
            prices = sorted(o.limit_price for o in self.books[good].sells if o.quantity > 0)
            if not prices:
                continue
            count = len(prices)
            stats = PriceStats(
                good=good,
                day=current_day,
                min=prices[0],
                p25=prices[math.floor(count * 0.25)],
                median=prices[count // 2],
                p75=prices[math.floor(count * 0.75)],
                max=prices[-1],
                avg=sum_money(prices) // count,
                total_orders=count,
            )
            history = self.price_history.setdefault(good, deque(maxlen=self.config.price_history_days))
            history.append(stats)
            recorded[good] = stats
        return recorded

