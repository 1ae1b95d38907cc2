# tests/projections/test_cli.py

import pandas as pd
import pytest
import yaml

import logging_config
from cohort_model.projections import cli


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logging_config.reset_logging()


def run_cli(tmp_path, *args):
    return cli.main(["--log-dir", str(tmp_path / "logs"), *args])


@pytest.mark.integration
def test_cli_writes_outputs(tmp_path, capsys):
    out = tmp_path / "results"
    code = run_cli(tmp_path, "--scenario", "low", "--end-year", "2030", "--output-dir", str(out))
    assert code == cli.EXIT_OK
    summary = pd.read_csv(out / "summary.csv")
    assert summary["year"].tolist() == list(range(2024, 2031))
    population = pd.read_csv(out / "population.csv")
    assert set(population["age_band"]) == {"child", "working", "retired"}
    assert (tmp_path / "logs" / "projection_events.log").exists()
    assert "Projection 2024-2030" in capsys.readouterr().out


def test_cli_invalid_parameter_exit_code(tmp_path):
    assert run_cli(tmp_path, "--fertility-rate", "9.0", "--end-year", "2025") == cli.EXIT_INVALID_PARAMETERS
    logging_config.reset_logging()
    assert run_cli(tmp_path, "--start-year", "2000") == cli.EXIT_INVALID_PARAMETERS


def test_cli_missing_scenario_file_exit_code(tmp_path):
    code = run_cli(tmp_path, "--scenario-file", str(tmp_path / "nope.yaml"))
    assert code == cli.EXIT_DATA_ERROR


def test_cli_scenario_file_with_window(tmp_path):
    scenario = tmp_path / "s.yaml"
    scenario.write_text(
        yaml.safe_dump(
            {"scenario": "high", "parameters": {"retirement_age": 68}, "projection": {"start_year": 2024, "end_year": 2027}}
        )
    )
    out = tmp_path / "results"
    assert run_cli(tmp_path, "--scenario-file", str(scenario), "--output-dir", str(out)) == cli.EXIT_OK
    assert len(pd.read_csv(out / "summary.csv")) == 4


def test_collect_overrides_only_keeps_given_flags():
    args = cli.parse_arguments(["--net-migration", "0", "--mortality-improvement-female", "0.02"])
    assert cli.collect_overrides(args) == {"net_migration": 0, "mortality_improvement": {"female": 0.02}}
    assert cli.collect_overrides(cli.parse_arguments([])) == {}
