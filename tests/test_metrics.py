import pandas as pd

from metrics import MetricsCollector, export_metrics, global_metrics_frame
from simulation.engine import SimulationEngine


def run_engine(small_config, tmp_path, days: int = 5) -> SimulationEngine:
    config = small_config.override({"simulation_days": days, "metrics_export_path": str(tmp_path / "metrics")})
    engine = SimulationEngine(config, seed=3)
    engine.run()
    return engine


def test_collector_records_one_row_per_day(small_config, tmp_path) -> None:
    engine = run_engine(small_config, tmp_path)
    collector = engine.collector

    assert len(collector.global_metrics) == 6
    totals = {row["total_money"] for row in collector.global_metrics.values()}
    assert totals == {347_000.0}
    row = collector.latest_global_metrics
    assert row["people"] == 23
    assert 0.0 <= row["unemployment_rate"] <= 1.0
    assert row["businesses"] == row["businesses_solvent"] + row["businesses_stressed"] + row["businesses_bankrupt"]
    assert set(collector.business_metrics) == {f"business_{i}" for i in range(1, 7)}


def test_export_writes_csv_files(small_config, tmp_path) -> None:
    engine = run_engine(small_config, tmp_path)

    written = export_metrics(engine.collector, timestamp="20260101_000000")

    names = {path.name for path in written}
    assert "global_metrics_20260101_000000.csv" in names
    assert "business_metrics_20260101_000000.csv" in names
    df = pd.read_csv(tmp_path / "metrics" / "global_metrics_20260101_000000.csv")
    assert list(df["time_step"]) == [0, 1, 2, 3, 4, 5]
    assert (df["total_money"] == 347_000.0).all()


def test_empty_collector_exports_nothing(small_config, tmp_path) -> None:
    collector = MetricsCollector(config=small_config.override({"metrics_export_path": str(tmp_path)}))

    assert collector.export_metrics() == []


def test_global_frame_is_sorted_by_time_step() -> None:
    df = global_metrics_frame({2: {"trades": 1}, 0: {"trades": 5}, 1: {"trades": 3}})

    assert list(df["time_step"]) == [0, 1, 2]
    assert list(df["trades"]) == [5, 3, 1]
