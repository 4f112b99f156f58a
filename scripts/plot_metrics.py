"""Generate Matplotlib plots for the latest simulation metrics export."""
from __future__ import annotations

import argparse
import csv
import shutil
from collections import defaultdict
from collections.abc import Callable, Iterable
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

REPO_ROOT = Path(__file__).resolve().parents[1]
METRICS_DIR = REPO_ROOT / "output" / "metrics"
PLOTS_DIR = REPO_ROOT / "output" / "plots"

PlotFunc = Callable[[list[dict[str, object]]], tuple[plt.Figure, str]]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render plots for the most recent metrics export using Matplotlib."
    )
    parser.add_argument(
        "--run-id",
        help="Timestamp suffix of the metrics files (e.g. 20250101_120000)."
        " Uses the newest export automatically when omitted.",
    )
    parser.add_argument(
        "--metrics-dir",
        default=str(METRICS_DIR),
        help="Directory containing the metrics CSV exports (default: output/metrics).",
    )
    parser.add_argument(
        "--plots-dir",
        default=str(PLOTS_DIR),
        help="Directory where rendered plots will be written (default: output/plots).",
    )
    return parser.parse_args(argv)


def detect_latest_run_id(metrics_dir: Path) -> str:
    candidates = sorted(metrics_dir.glob("global_metrics_*.csv"))
    if not candidates:
        raise FileNotFoundError(f"No global_metrics_*.csv files were found in {metrics_dir}.")
    latest = max(candidates, key=lambda path: path.stat().st_mtime)
    suffix = latest.stem.split("global_metrics_")[-1]
    if not suffix:
        raise ValueError(f"Unable to parse run identifier from file name: {latest.name}.")
    return suffix


def load_csv_rows(path: Path, skip_fields: Iterable[str] | None = None) -> list[dict[str, object]]:
    skip_fields = set(skip_fields or [])
    rows: list[dict[str, object]] = []
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for raw in reader:
            parsed: dict[str, object] = {}
            for key, value in raw.items():
                if key == "time_step":
                    parsed[key] = int(value)
                elif key in skip_fields:
                    parsed[key] = value
                else:
                    parsed[key] = try_float(value)
            rows.append(parsed)
    return rows


def try_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def ensure_dirs(run_dir: Path) -> Path:
    run_dir.mkdir(parents=True, exist_ok=True)
    latest_dir = run_dir.parent / "latest"
    latest_dir.mkdir(parents=True, exist_ok=True)
    return latest_dir


def save_figure(fig: plt.Figure, filename: str, run_dir: Path, latest_dir: Path) -> None:
    target = run_dir / filename
    fig.savefig(target, dpi=150, bbox_inches="tight")
    shutil.copy2(target, latest_dir / filename)
    plt.close(fig)


def extract_series(
    rows: list[dict[str, object]], *columns: str
) -> tuple[list[int], dict[str, list[float]]]:
    ordered = sorted(rows, key=lambda row: int(row["time_step"]))
    steps = [int(row["time_step"]) for row in ordered]
    series: dict[str, list[float]] = {}
    for column in columns:
        series[column] = [float(row.get(column) or 0.0) for row in ordered]
    return steps, series


def series_by_key(
    rows: list[dict[str, object]], key_column: str, value_column: str
) -> dict[str, tuple[list[int], list[float]]]:
    """Split rows into one (steps, values) series per key (business id or good)."""
    grouped: defaultdict[str, list[tuple[int, float]]] = defaultdict(list)
    for row in rows:
        value = row.get(value_column)
        if isinstance(value, (int, float)):
            grouped[str(row.get(key_column, ""))].append((int(row["time_step"]), float(value)))
    result: dict[str, tuple[list[int], list[float]]] = {}
    for key in sorted(grouped):
        points = sorted(grouped[key])
        result[key] = ([step for step, _ in points], [value for _, value in points])
    return result


def plot_money_distribution(global_rows: list[dict[str, object]]) -> tuple[plt.Figure, str]:
    steps, data = extract_series(global_rows, "people_money", "business_money", "treasury")
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.stackplot(
        steps,
        data["people_money"],
        data["business_money"],
        data["treasury"],
        labels=["People", "Businesses", "Government"],
        alpha=0.8,
    )
    ax.set_title("Money Distribution")
    ax.set_xlabel("Day")
    ax.set_ylabel("Credits")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left")
    return fig, "money_distribution.png"


def plot_labor_market(global_rows: list[dict[str, object]]) -> tuple[plt.Figure, str]:
    steps, data = extract_series(global_rows, "unemployment_rate", "businesses", "businesses_bankrupt")
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(steps, data["unemployment_rate"], label="Unemployment Rate")
    ax.set_xlabel("Day")
    ax.set_ylabel("Share of People")
    ax.set_ylim(bottom=0)

    ax_count = ax.twinx()
    ax_count.plot(steps, data["businesses"], color="tab:green", linestyle="--", label="Businesses")
    ax_count.plot(
        steps, data["businesses_bankrupt"], color="tab:red", linestyle=":", label="Bankrupt"
    )
    ax_count.set_ylabel("# Businesses")

    ax.set_title("Labor Market & Businesses")
    ax.grid(True, alpha=0.3)
    lines = ax.get_lines() + ax_count.get_lines()
    ax.legend(lines, [line.get_label() for line in lines], loc="upper right")
    return fig, "labor_market.png"


def plot_trading(global_rows: list[dict[str, object]]) -> tuple[plt.Figure, str]:
    steps, data = extract_series(global_rows, "trade_volume", "units_traded")
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.bar(steps, data["trade_volume"], color="tab:blue", alpha=0.6, label="Trade Volume")
    ax.set_xlabel("Day")
    ax.set_ylabel("Credits")
    ax_units = ax.twinx()
    ax_units.plot(steps, data["units_traded"], color="tab:orange", label="Units Traded")
    ax_units.set_ylabel("Units")
    ax.set_title("Daily Trading")
    ax.grid(True, alpha=0.3)
    return fig, "trading.png"


def plot_prices(price_rows: list[dict[str, object]]) -> tuple[plt.Figure, str]:
    medians = series_by_key(price_rows, "good", "median")
    lows = series_by_key(price_rows, "good", "p25")
    highs = series_by_key(price_rows, "good", "p75")
    fig, ax = plt.subplots(figsize=(10, 6))
    for good, (steps, values) in medians.items():
        (line,) = ax.plot(steps, values, label=good)
        if good in lows and good in highs and len(lows[good][1]) == len(values):
            ax.fill_between(steps, lows[good][1], highs[good][1], color=line.get_color(), alpha=0.2)
    ax.set_title("Sell Prices (median, p25-p75)")
    ax.set_xlabel("Day")
    ax.set_ylabel("Credits")
    ax.set_yscale("log")
    ax.grid(True, alpha=0.3)
    ax.legend()
    return fig, "prices.png"


def plot_business_money(business_rows: list[dict[str, object]]) -> tuple[plt.Figure, str]:
    fig, ax = plt.subplots(figsize=(10, 6))
    for business_id, (steps, values) in series_by_key(business_rows, "agent_id", "money").items():
        ax.plot(steps, values, label=business_id, linewidth=1)
    ax.set_title("Business Balances")
    ax.set_xlabel("Day")
    ax.set_ylabel("Credits")
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize="small", ncol=2)
    return fig, "business_money.png"


PLOT_SPECS: list[tuple[str, PlotFunc]] = [
    ("global", plot_money_distribution),
    ("global", plot_labor_market),
    ("global", plot_trading),
    ("price", plot_prices),
    ("business", plot_business_money),
]


def render_plots(metrics_dir: Path, plots_dir: Path, run_id: str | None = None) -> list[Path]:
    run_id = run_id or detect_latest_run_id(metrics_dir)
    run_dir = plots_dir / run_id
    latest_dir = ensure_dirs(run_dir)

    data_by_scope: dict[str, list[dict[str, object]]] = {
        "global": load_csv_rows(metrics_dir / f"global_metrics_{run_id}.csv"),
    }
    optional_files = {
        "price": (f"price_metrics_{run_id}.csv", "good"),
        "business": (f"business_metrics_{run_id}.csv", "agent_id"),
    }
    for scope, (filename, key_column) in optional_files.items():
        path = metrics_dir / filename
        data_by_scope[scope] = (
            load_csv_rows(path, skip_fields={key_column, "name", "production_cycle", "solvency"})
            if path.exists()
            else []
        )

    written: list[Path] = []
    for scope, plot_func in PLOT_SPECS:
        rows = data_by_scope[scope]
        if not rows:
            continue
        fig, filename = plot_func(rows)
        save_figure(fig, filename, run_dir, latest_dir)
        written.append(run_dir / filename)
    return written


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    written = render_plots(Path(args.metrics_dir), Path(args.plots_dir), args.run_id)
    for path in written:
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
