# government_agent.py
from collections.abc import Iterable

from config import SimulationConfig
from ledger import Ledger
from logger import log
from money import ZERO, Money

from .base_agent import BaseAgent
from .business_agent import Business


class Government(BaseAgent):
    """
    Collects corporate income tax and throttles business creation.

    The treasury is the government's ledger balance. Personal income tax is
    validated and stored but never levied.
    """

    agent_type = "Government"

    def __init__(self, unique_id: str | None = None, *, config: SimulationConfig) -> None:
        self.config: SimulationConfig = config
        super().__init__(unique_id or self.config.GOVERNMENT_ID)

        government_config = self.config.government
        self.cit: float = government_config.cit.value
        self.pit: float = government_config.pit.value
        self.min_time_between_business_creation: int = (
            government_config.min_time_between_business_creation.value
        )
        self.last_business_creation_day: int = 0
        self.cit_collected_total: Money = ZERO
        self.businesses_authorized: int = 0

    def collect_cit(self, business: Business, profit: Money, ledger: Ledger, current_day: int) -> Money:
        """
        Collect corporate income tax on a business's period profit.

        Losses are neither taxed nor refunded, and the tax is capped at what
        the business holds, so collection never fails.

        Returns:
            The tax actually collected
        """
        if profit.cents <= 0:
            return ZERO
        tax = min(profit * self.cit, ledger.balance(business.unique_id))
        if tax.cents <= 0:
            return ZERO
        ledger.transfer(business.unique_id, self.unique_id, tax, "tax", current_day)
        self.cit_collected_total = self.cit_collected_total + tax
        log(
            f"Government {self.unique_id}: collected {tax} CIT from {business.unique_id} "
            f"(profit {profit}).",
            level="DEBUG",
        )
        return tax

    def authorize_business_creation(self, current_day: int) -> bool:
        """Allow a new business if enough days passed since the last one."""
        if current_day - self.last_business_creation_day < self.min_time_between_business_creation:
            return False
        self.last_business_creation_day = current_day
        self.businesses_authorized += 1
        log(f"Government {self.unique_id}: authorized business creation on day {current_day}.", level="INFO")
        return True

    def settle_month(self, businesses: Iterable[Business], ledger: Ledger, current_day: int) -> Money:
        """
        Tax every business on its monthly profit, then let it pay dividends.

        Returns:
            Total CIT collected this month
        """
        collected = ZERO
        for business in businesses:
            profit = business.period_profit()
            if business.is_bankrupt:
                business.close_period()
                continue
            tax = self.collect_cit(business, profit, ledger, current_day)
            business.pay_dividend(profit - tax, ledger, current_day)
            business.close_period()
            collected = collected + tax
        log(f"Government {self.unique_id}: month closed on day {current_day}, CIT {collected}.", level="INFO")
        return collected
