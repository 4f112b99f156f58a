"""Metrics package for economic simulation analysis."""

from .base import MONEY_DECIMALS, AgentMetricsDict, MetricDict, TimeSeriesDict, TimeStep, ValueType
from .collector import MetricsCollector
from .exporter import export_metrics, global_metrics_frame

__all__ = [
    "MetricsCollector",
    "export_metrics",
    "global_metrics_frame",
    "MONEY_DECIMALS",
    "AgentMetricsDict",
    "MetricDict",
    "TimeSeriesDict",
    "TimeStep",
    "ValueType",
]
