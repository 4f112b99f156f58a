import math

from agents.business_agent import Business, resolve_bankruptcy
from agents.labor_market import LaborMarket
from agents.market import BUY, SELL, Market
from agents.person_agent import Person
from config import SimulationConfig
from ledger import Ledger
from money import Money


class Economy:
    """A tiny hand-built world around a single business."""

    def __init__(self, cycle: str = "farming", money: str = "100kCr", people: int = 6, **overrides: object):
        self.config = SimulationConfig().override(overrides) if overrides else SimulationConfig()
        self.ledger = Ledger()
        self.market = Market(config=self.config)
        self.labor_market = LaborMarket(config=self.config)
        self.people: dict[str, Person] = {}
        for i in range(1, people + 1):
            person = Person(f"person_{i}", config=self.config)
            self.people[person.unique_id] = person
            self.ledger.open_account(person.unique_id)
            self.labor_market.register_worker(person)
        self.ledger.open_account("owner")
        self.ledger.open_account("government")
        self.business = Business(
            "business_1",
            self.config.production_cycles_by_name[cycle],
            owner_id="owner",
            config=self.config,
        )
        self.ledger.open_account(self.business.unique_id, Money.parse(money))

    def hire(self, count: int, day: int = 0) -> None:
        for worker in self.labor_market.unemployed()[:count]:
            self.labor_market.hire(self.business, worker, self.business.salary, day)


def test_price_rises_by_full_step_under_extreme_demand() -> None:
    eco = Economy()
    business = eco.business
    business.price = Money.parse("100Cr")
    business.sold_today = 10

    business.adjust_price(eco.market, current_day=0)

    assert business.price == Money.parse("105Cr")


def test_overstock_lowers_price_within_bound() -> None:
    eco = Economy()
    business = eco.business
    business.price = Money.parse("100Cr")
    business.inventory["food"] = 1_000

    business.adjust_price(eco.market, current_day=0)

    assert business.price == Money.parse("95Cr")


def test_price_change_is_always_bounded() -> None:
    eco = Economy()
    business = eco.business
    for stock in (0, 5, 29, 30, 31, 60, 500):
        for cents in (1, 19, 137, 800, 10_000):
            business.price = Money(cents)
            business.inventory["food"] = stock
            business.sales_history.clear()

            business.adjust_price(eco.market, current_day=0)

            bound = math.floor(cents * business.max_price_change)
            assert abs(business.price.cents - cents) <= bound
            assert business.price.cents >= 1


def test_price_at_target_stock_is_unchanged() -> None:
    eco = Economy()
    business = eco.business
    business.price = Money.parse("8Cr")
    business.inventory["food"] = business.keep_resources_for_cycles * 10

    business.adjust_price(eco.market, current_day=0)

    assert business.price == Money.parse("8Cr")


def test_staffing_cooldown() -> None:
    eco = Economy()
    business = eco.business

    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=0) == 1
    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=4) == 0
    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=5) == 1
    assert business.staff == ["person_1", "person_2"]
    assert business.last_staff_change_day == 5


def test_hiring_needs_funds_for_the_extra_wage() -> None:
    eco = Economy(money="1kCr")

    assert eco.business.adjust_staff(eco.labor_market, eco.ledger, current_day=0) == 0
    assert eco.business.staff == []


def test_unsold_output_above_goal_fires_newest_worker() -> None:
    eco = Economy()
    eco.hire(3)
    business = eco.business
    business.last_staff_change_day = None
    business.inventory["food"] = business.production_goal_cycles * 10 + 1

    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=10) == -1
    assert business.staff == ["person_1", "person_2"]
    assert eco.people["person_3"].employer_id is None


def test_production_is_limited_by_staff_and_inputs() -> None:
    eco = Economy(cycle="carpentry")
    eco.hire(2)
    business = eco.business
    business.inventory["wood"] = 3

    assert business.produce() == 1
    assert business.inventory == {"wood": 1, "furniture": 1}
    assert business.produce() == 0


def test_list_output_only_lists_new_units() -> None:
    eco = Economy()
    business = eco.business
    business.inventory["food"] = 10

    assert business.list_output(eco.market, current_day=0) == 10
    assert business.list_output(eco.market, current_day=0) == 0
    business.inventory["food"] = 14
    assert business.list_output(eco.market, current_day=1) == 4
    assert eco.market.outstanding(business.unique_id, SELL, "food") == 14


def test_inputs_are_ordered_for_a_few_cycles_at_half_output_value() -> None:
    eco = Economy(cycle="carpentry")
    eco.hire(2)
    business = eco.business

    ordered = business.order_inputs(eco.market, eco.ledger, current_day=0)

    (order,) = eco.market.orders_of(business.unique_id, BUY)
    assert ordered == 12
    assert order.good == "wood"
    assert order.limit_price == Money.parse("15Cr")
    assert business.order_inputs(eco.market, eco.ledger, current_day=0) == 0


def test_wages_are_paid_daily_and_booked_as_costs() -> None:
    eco = Economy()
    eco.hire(2)

    assert eco.business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=0) == "solvent"
    assert eco.ledger.balance("person_1") == Money.parse("40Cr")
    assert eco.business.period_costs == Money.parse("80Cr")


def test_insolvency_fires_newest_workers_then_bankruptcy() -> None:
    eco = Economy(money="90Cr")
    eco.hire(3)
    business = eco.business

    assert business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=0) == "stressed"
    assert business.staff == ["person_1", "person_2"]
    assert eco.people["person_3"].employer_id is None
    assert eco.ledger.balance(business.unique_id) == Money.parse("10Cr")

    assert business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=1) == "bankrupt"
    assert business.staff == []
    assert business.bankrupt_day == 1
    # Bankruptcy is terminal.
    assert business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=2) == "bankrupt"
    assert business.produce() == 0


def test_stressed_business_recovers_when_wages_are_covered() -> None:
    eco = Economy(money="90Cr")
    eco.hire(3)
    business = eco.business
    business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=0)
    eco.ledger.transfer("person_1", business.unique_id, Money.parse("40Cr"), "trade", 0)
    eco.ledger.transfer("person_2", business.unique_id, Money.parse("40Cr"), "trade", 0)

    assert business.pay_wages(eco.people, eco.labor_market, eco.ledger, current_day=1) == "solvent"


def test_freeze_cancels_orders_and_keeps_money() -> None:
    eco = Economy(money="90Cr")
    business = eco.business
    business.inventory["food"] = 5
    business.list_output(eco.market, current_day=0)
    business.solvency = "bankrupt"

    resolve_bankruptcy(business, eco.market, eco.ledger, "government", 0, "freeze")

    assert eco.market.orders_of(business.unique_id) == []
    assert eco.ledger.balance(business.unique_id) == Money.parse("90Cr")


def test_liquidation_pays_the_owner() -> None:
    eco = Economy(money="90Cr")
    business = eco.business
    business.solvency = "bankrupt"

    resolve_bankruptcy(business, eco.market, eco.ledger, "government", 0, "liquidate")

    assert eco.ledger.balance(business.unique_id) == Money(0)
    assert eco.ledger.balance("owner") == Money.parse("90Cr")


def test_ownerless_liquidation_pays_the_government() -> None:
    eco = Economy(money="90Cr")
    eco.business.owner_id = None

    resolve_bankruptcy(eco.business, eco.market, eco.ledger, "government", 0, "liquidate")

    assert eco.ledger.balance("government") == Money.parse("90Cr")


def test_dividend_is_share_of_after_tax_profit() -> None:
    eco = Economy(money="2kCr")

    paid = eco.business.pay_dividend(Money.parse("1kCr"), eco.ledger, current_day=29)

    assert paid == Money.parse("500Cr")
    assert eco.ledger.balance("owner") == Money.parse("500Cr")
    assert eco.business.pay_dividend(Money.parse("-1kCr"), eco.ledger, current_day=29) == Money(0)


def test_dividend_is_capped_at_balance() -> None:
    eco = Economy(money="100Cr")

    assert eco.business.pay_dividend(Money.parse("1kCr"), eco.ledger, current_day=29) == Money.parse("100Cr")


def test_buy_backlog_alone_never_fires() -> None:
    eco = Economy()
    eco.hire(1)
    business = eco.business
    business.last_staff_change_day = None
    backlog = business.production_goal_cycles * business.production_cycle.output_units * 3
    for person_id in list(eco.people)[1:]:
        eco.market.place(person_id, BUY, "food", backlog, Money.parse("10Cr"), current_day=0)

    assert business.output_stock == 0
    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=10) == 1
    assert len(business.staff) == 2


def test_listed_units_count_as_unsold_output() -> None:
    eco = Economy()
    eco.hire(2)
    business = eco.business
    business.last_staff_change_day = None
    business.inventory["food"] = business.production_goal_cycles * 10 + 1
    business.list_output(eco.market, current_day=0)

    assert eco.market.outstanding(business.unique_id, SELL, "food") > 0
    assert business.adjust_staff(eco.labor_market, eco.ledger, current_day=10) == -1


def test_price_below_twenty_cents_cannot_move_a_whole_cent() -> None:
    eco = Economy()
    business = eco.business
    business.inventory["food"] = 0

    business.price = Money(19)
    business.adjust_price(eco.market, current_day=0)
    assert business.price == Money(19)

    business.price = Money(20)
    business.adjust_price(eco.market, current_day=1)
    assert business.price == Money(21)
