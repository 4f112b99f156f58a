"""MetricsCollector - collects metrics from simulation views."""

from pathlib import Path
from typing import Dict, Optional

from config import CONFIG_MODEL, SimulationConfig
from logger import log
from money import Money
from simulation.views import SimulationView

from .base import MONEY_DECIMALS, AgentMetricsDict, MetricDict, TimeStep


def _credits(amount: Money) -> float:
    return round(amount.as_credits, MONEY_DECIMALS)


class MetricsCollector:
    """
    Collects and exports economic metrics of a simulation run.

    One row per day goes into ``global_metrics``; businesses and goods get
    their own time series keyed by id.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """Initialize the metrics collector."""
        self.config = config or CONFIG_MODEL
        self.export_path = Path(self.config.metrics_export_path)
        self.global_metrics: Dict[TimeStep, MetricDict] = {}
        self.business_metrics: AgentMetricsDict = {}
        self.price_metrics: AgentMetricsDict = {}
        self.latest_global_metrics: MetricDict = {}

        self.global_metrics_df = None
        self.business_metrics_df = None
        self.price_metrics_df = None

    def collect(self, view: SimulationView) -> MetricDict:
        """Record the metrics of one day and return the global row."""
        day = view.day
        solvency = view.businesses_by_solvency()
        trades = view.market.trades_today
        employed = sum(1 for p in view.people if p.employer_id is not None)

        row: MetricDict = {
            "total_money": _credits(view.total_money),
            "money_supply": _credits(view.money_supply),
            "people_money": _credits(view.people_money),
            "business_money": _credits(view.business_money),
            "treasury": _credits(view.government.treasury),
            "cit_collected_total": _credits(view.government.cit_collected_total),
            "people": len(view.people),
            "employed": employed,
            "unemployment_rate": view.unemployment_rate,
            "businesses": len(view.businesses),
            "businesses_solvent": solvency["solvent"],
            "businesses_stressed": solvency["stressed"],
            "businesses_bankrupt": solvency["bankrupt"],
            "trades": len(trades),
            "units_traded": sum(t.quantity for t in trades),
            "trade_volume": _credits(sum((t.value for t in trades), Money())),
            "open_orders": len(view.market.orders),
        }
        for good, price in sorted(view.market.last_prices.items()):
            row[f"last_price_{good}"] = _credits(price)
        self.global_metrics[day] = row
        self.latest_global_metrics = row

        for business in view.businesses:
            self.business_metrics.setdefault(business.unique_id, {})[day] = {
                "name": business.name,
                "production_cycle": business.production_cycle,
                "money": _credits(business.money),
                "price": _credits(business.price),
                "staff": len(business.staff),
                "output_stock": business.inventory.get(business.output_good, 0),
                "solvency": business.solvency,
                "period_revenue": _credits(business.period_revenue),
                "period_costs": _credits(business.period_costs),
            }

        for good, stats in view.market.price_stats.items():
            if stats.day != day - 1:
                continue
            self.price_metrics.setdefault(good, {})[day] = {
                "min": _credits(stats.min),
                "p25": _credits(stats.p25),
                "median": _credits(stats.median),
                "p75": _credits(stats.p75),
                "max": _credits(stats.max),
                "avg": _credits(stats.avg),
                "total_orders": stats.total_orders,
            }

        log(
            f"MetricsCollector: day {day} total money {view.total_money}, "
            f"unemployment {view.unemployment_rate:.2%}",
            level="DEBUG",
        )
        return row

    def export_metrics(self) -> list[Path]:
        """Persist collected metrics as CSV files."""
        from .exporter import export_metrics

        return export_metrics(self)
