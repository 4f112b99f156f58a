# main.py
import argparse
import json
import os
import time
from pathlib import Path
from typing import Any

from config import CONFIG_MODEL, SimulationConfig, load_config_file
from logger import log, setup_logger
from money import to_literal
from simulation.driver import SimulationDriver
from simulation.engine import SimulationEngine
from simulation.views import SimulationView

DEFAULT_CONFIG_FILES = ("config.yaml", "config.yml", "config.json")
REALTIME_TICK_SECONDS = 0.05


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the market economy simulation.")
    parser.add_argument("--config", help="YAML or JSON configuration file (or set SIM_CONFIG).")
    parser.add_argument("--days", type=int, help="Number of days to simulate.")
    parser.add_argument("--seed", type=int, help="Seed of the random source.")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace the run with game.speed real seconds per simulated day.",
    )
    parser.add_argument("--no-metrics", action="store_true", help="Skip the CSV metrics export.")
    return parser.parse_args(argv)


def _resolve_config_from_args_or_env(argv: list[str] | None = None) -> SimulationConfig:
    """CLI ``--config`` wins over ``SIM_CONFIG``, which wins over a config file in the working directory."""
    args = parse_args(argv)
    candidates = [args.config, os.getenv("SIM_CONFIG")]
    candidates.extend(name for name in DEFAULT_CONFIG_FILES if Path(name).exists())
    for candidate in candidates:
        if candidate:
            return load_config_file(candidate)
    return CONFIG_MODEL


def summarize_simulation(view: SimulationView, config: SimulationConfig) -> dict[str, Any]:
    """Generate and save simulation summary to a JSON file."""
    summary: dict[str, Any] = {
        "day": view.day,
        "money": {
            "supply": to_literal(view.money_supply),
            "total": to_literal(view.total_money),
            "people": to_literal(view.people_money),
            "businesses": to_literal(view.business_money),
        },
        "Government": {
            "treasury": to_literal(view.government.treasury),
            "cit_collected_total": to_literal(view.government.cit_collected_total),
            "last_business_creation_day": view.government.last_business_creation_day,
        },
        "unemployment_rate": view.unemployment_rate,
        "Businesses": {
            b.unique_id: {
                "name": b.name,
                "production_cycle": b.production_cycle,
                "money": to_literal(b.money),
                "price": to_literal(b.price),
                "staff": len(b.staff),
                "inventory": dict(b.inventory),
                "solvency": b.solvency,
            }
            for b in view.businesses
        },
        "prices": {good: to_literal(price) for good, price in sorted(view.market.last_prices.items())},
    }

    summary_path = Path(config.summary_file)
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=config.json_indent)

    log(f"Simulation summary stored in {summary_path}", level="INFO")
    return summary


def run_realtime(config: SimulationConfig) -> SimulationView:
    """Drive the simulation with wall-clock time until ``simulation_days`` have passed."""
    driver = SimulationDriver(config)
    if driver.paused:
        log("game.speed is 0 (paused); running at 1 day per second instead.", level="WARNING")
        driver.set_speed(1.0)
    last = time.monotonic()
    while driver.state.day < config.simulation_days:
        time.sleep(REALTIME_TICK_SECONDS)
        now = time.monotonic()
        if driver.update(now - last):
            log(f"Day {driver.state.day} reached.", level="INFO")
        last = now
    return driver.view()


def main(argv: list[str] | None = None) -> SimulationView:
    """Main simulation execution function."""
    args = parse_args(argv)
    config = _resolve_config_from_args_or_env(argv)
    overrides: dict[str, object] = {}
    if args.days is not None:
        overrides["simulation_days"] = args.days
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        config = config.override(overrides)

    setup_logger(config=config)
    log("Starting market simulation...", level="INFO")

    if args.realtime:
        view = run_realtime(config)
    else:
        engine = SimulationEngine(config)
        view = engine.run()
        if not args.no_metrics:
            engine.collector.export_metrics()

    log("Simulation complete.", level="INFO")
    summarize_simulation(view, config)
    return view


if __name__ == "__main__":
    main()
