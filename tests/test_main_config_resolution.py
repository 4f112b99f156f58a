import json
import textwrap

import main as main_module


def write_yaml(path, days: int) -> None:
    path.write_text(
        textwrap.dedent(
            f"""
            simulation_days: {days}
            init:
              people:
                poor: 4
                rich: 1
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )


def test_resolve_config_uses_env_var(tmp_path, monkeypatch) -> None:
    cfg_path = tmp_path / "env.yaml"
    write_yaml(cfg_path, 11)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SIM_CONFIG", str(cfg_path))

    cfg = main_module._resolve_config_from_args_or_env([])

    assert cfg.simulation_days == 11


def test_cli_config_wins_over_env_var(tmp_path, monkeypatch) -> None:
    env_path = tmp_path / "env.yaml"
    cli_path = tmp_path / "cli.yaml"
    write_yaml(env_path, 11)
    write_yaml(cli_path, 22)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SIM_CONFIG", str(env_path))

    cfg = main_module._resolve_config_from_args_or_env(["--config", str(cli_path)])

    assert cfg.simulation_days == 22


def test_config_file_in_working_directory_is_picked_up(tmp_path, monkeypatch) -> None:
    write_yaml(tmp_path / "config.yaml", 33)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SIM_CONFIG", raising=False)

    cfg = main_module._resolve_config_from_args_or_env([])

    assert cfg.simulation_days == 33


def test_defaults_without_any_config(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SIM_CONFIG", raising=False)

    cfg = main_module._resolve_config_from_args_or_env([])

    assert cfg is main_module.CONFIG_MODEL


def test_main_runs_and_writes_summary(tmp_path, monkeypatch) -> None:
    cfg_path = tmp_path / "run.yaml"
    cfg_path.write_text(
        textwrap.dedent(
            f"""
            simulation_days: 50
            init:
              people:
                poor: 20
                rich: 3
            log_file: {tmp_path / "sim.log"}
            summary_file: {tmp_path / "summary.json"}
            metrics_export_path: {tmp_path / "metrics"}
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SIM_CONFIG", raising=False)

    view = main_module.main(["--config", str(cfg_path), "--days", "3", "--seed", "9"])

    assert view.day == 3
    summary = json.loads((tmp_path / "summary.json").read_text(encoding="utf-8"))
    assert summary["day"] == 3
    assert summary["money"]["supply"] == summary["money"]["total"]
    assert len(summary["Businesses"]) == 6
    assert list((tmp_path / "metrics").glob("global_metrics_*.csv"))
