"""Exporter module - CSV export functionality."""

import warnings
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import pandas as pd

from logger import log

from .base import AgentMetricsDict, MetricDict, TimeStep


class MetricsCollectorProtocol(Protocol):
    """Protocol for metrics collector to allow duck typing"""

    global_metrics: dict[TimeStep, MetricDict]
    business_metrics: AgentMetricsDict
    price_metrics: AgentMetricsDict
    export_path: Path


def export_metrics(collector: MetricsCollectorProtocol, timestamp: Optional[str] = None) -> list[Path]:
    """Export time series of metrics to structured CSV files using pandas."""
    timestamp = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S")
    collector.export_path.mkdir(parents=True, exist_ok=True)

    exports = [
        _export_global_metrics_df(collector, timestamp),
        _export_agent_metrics_df(collector, collector.business_metrics, "business_metrics", "agent_id", timestamp),
        _export_agent_metrics_df(collector, collector.price_metrics, "price_metrics", "good", timestamp),
    ]

    written = [path for path in exports if path is not None]
    if written:
        log(
            "MetricsCollector: Exported CSV metrics: " + ", ".join(str(p.name) for p in written),
            level="INFO",
        )
    else:
        log("MetricsCollector: No metrics available for CSV export", level="WARNING")
    return written


def global_metrics_frame(global_metrics: dict[TimeStep, MetricDict]) -> pd.DataFrame:
    rows = []
    for step, metrics in global_metrics.items():
        row = {"time_step": int(step)}
        row.update(metrics)
        rows.append(row)

    df = pd.DataFrame.from_records(rows)
    if not df.empty and "time_step" in df.columns:
        df = df.sort_values("time_step")
    return df


def _export_global_metrics_df(collector, timestamp):
    if not collector.global_metrics:
        return None

    df = global_metrics_frame(collector.global_metrics)
    output_file = collector.export_path / f"global_metrics_{timestamp}.csv"
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        df.to_csv(output_file, index=False)
    collector.global_metrics_df = df
    return output_file


def _export_agent_metrics_df(
    collector,
    agent_metrics,
    filename_prefix,
    key_column,
    timestamp,
):
    if not agent_metrics:
        return None

    rows = []
    for key, time_series in agent_metrics.items():
        for step, metrics in time_series.items():
            row = {"time_step": int(step), key_column: str(key)}
            row.update(metrics)
            rows.append(row)

    if not rows:
        return None

    df = pd.DataFrame.from_records(rows)
    if not df.empty and "time_step" in df.columns:
        df = df.sort_values(["time_step", key_column])

    output_file = collector.export_path / f"{filename_prefix}_{timestamp}.csv"
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        df.to_csv(output_file, index=False)

    if filename_prefix.startswith("business"):
        collector.business_metrics_df = df
    elif filename_prefix.startswith("price"):
        collector.price_metrics_df = df

    return output_file
