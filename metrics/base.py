"""Base types and constants for the metrics package."""

from typing import Any, Dict, Union

# Type aliases
TimeStep = int
ValueType = Union[float, int, str, bool, None]
MetricDict = Dict[str, Any]
TimeSeriesDict = Dict[TimeStep, MetricDict]
AgentMetricsDict = Dict[str, TimeSeriesDict]

# Money columns are exported in credits (two decimals).
MONEY_DECIMALS = 2
