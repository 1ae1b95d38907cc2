# cohort_model/projections/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from cohort_model.config.loaders import load_scenario_file
from cohort_model.config.scenarios import DEFAULT_RETIREMENT_AGE, ScenarioType, build_parameters, resolve_scenario_type
from cohort_model.data.readers import load_reference_data
from cohort_model.exceptions import ConfigLoadError, DataReadError, InvalidParameterError
from cohort_model.projections.runner import ProjectionResult, run_projection
from cohort_model.projections.summaries import build_population_frame, build_summary_frame
from logging_config import DEBUG_LOGGER, PERFORMANCE_LOGGER, PROJECTION_LOGGER, setup_logging

logger = logging.getLogger(__name__)

LOG_DIR = Path("output_dev/projection_logs")
DEFAULT_START_YEAR = 2024
DEFAULT_END_YEAR = 2100

EXIT_OK = 0
EXIT_DATA_ERROR = 1
EXIT_INVALID_PARAMETERS = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Run a cohort-component population projection for Portugal.")

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--scenario",
        choices=[s.value for s in ScenarioType if s is not ScenarioType.CUSTOM],
        default=ScenarioType.MEDIUM.value,
        help="Preset parameter bundle (default: medium).",
    )
    source.add_argument("--scenario-file", type=str, default=None, help="Path to a scenario YAML file.")

    overrides = parser.add_argument_group("parameter overrides")
    overrides.add_argument("--retirement-age", type=int, default=None)
    overrides.add_argument("--fertility-rate", type=float, default=None)
    overrides.add_argument("--net-migration", type=int, default=None)
    overrides.add_argument("--mortality-improvement-male", type=float, default=None)
    overrides.add_argument("--mortality-improvement-female", type=float, default=None)
    overrides.add_argument("--entry-age-shift", type=int, default=None)
    overrides.add_argument("--unemployment-adjustment", type=float, default=None)

    parser.add_argument("--start-year", type=int, default=None, help=f"First year (default: {DEFAULT_START_YEAR})")
    parser.add_argument("--end-year", type=int, default=None, help=f"Last year (default: {DEFAULT_END_YEAR})")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for summary.csv and population.csv. Nothing is written if omitted.",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def collect_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Parameter overrides given on the command line, by model field name."""
    overrides: Dict[str, Any] = {}
    simple = {
        "fertility_rate": args.fertility_rate,
        "net_migration": args.net_migration,
        "workforce_entry_age_shift": args.entry_age_shift,
        "unemployment_adjustment": args.unemployment_adjustment,
    }
    overrides.update({k: v for k, v in simple.items() if v is not None})

    improvement = {
        "male": args.mortality_improvement_male,
        "female": args.mortality_improvement_female,
    }
    improvement = {k: v for k, v in improvement.items() if v is not None}
    if improvement:
        overrides["mortality_improvement"] = improvement
    return overrides


def initialize_logging(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    setup_logging(log_dir=log_dir, debug=debug)
    logger.info("Starting cohort projection")
    logger.info(f"Command line arguments: {sys.argv}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Pandas version: {pd.__version__}")
    logger.info(f"NumPy version: {np.__version__}")
    logging.getLogger(DEBUG_LOGGER).debug("Debug logging enabled")


def save_results(result: ProjectionResult, output_path: Path) -> None:
    output_path.mkdir(parents=True, exist_ok=True)
    summary_fp = output_path / "summary.csv"
    population_fp = output_path / "population.csv"
    build_summary_frame(result.records).to_csv(summary_fp, index=False)
    build_population_frame(result.records, retirement_age=result.parameters.retirement_age).to_csv(
        population_fp, index=False
    )
    logger.info(f"Wrote {summary_fp} and {population_fp}")


def print_overview(result: ProjectionResult) -> None:
    first, last = result.records[0], result.records[-1]
    print(f"Projection {first.year}-{last.year}: {len(result.records)} years")
    for record in (first, last):
        print(
            f"  {record.year}: population {record.total_population:,}, "
            f"dependency ratio {record.old_age_dependency_ratio:.1f}, "
            f"median age {record.median_age}, "
            f"sustainability index {record.economic.sustainability_index:.1f}"
        )
    if result.discrepancies:
        print(f"  {len(result.discrepancies)} balance discrepancies (see warnings log)")


def execute(args: argparse.Namespace) -> ProjectionResult:
    """Resolve parameters, load reference data and run the projection."""
    overrides = collect_overrides(args)
    start_year, end_year = args.start_year, args.end_year

    if args.scenario_file:
        scenario_cfg = load_scenario_file(Path(args.scenario_file))
        values = scenario_cfg.parameters.model_dump()
        if args.retirement_age is not None:
            values["retirement_age"] = args.retirement_age
        if overrides:
            improvement = overrides.pop("mortality_improvement", None)
            values.update(overrides)
            if improvement:
                values["mortality_improvement"] = {**values["mortality_improvement"], **improvement}
        params = build_parameters(ScenarioType.CUSTOM, overrides=values)
        start_year = start_year if start_year is not None else scenario_cfg.start_year
        end_year = end_year if end_year is not None else scenario_cfg.end_year
        scenario_label = scenario_cfg.name
    else:
        requested = ScenarioType(args.scenario)
        retirement_age = args.retirement_age if args.retirement_age is not None else DEFAULT_RETIREMENT_AGE
        params = build_parameters(requested, retirement_age=retirement_age, overrides=overrides)
        scenario_label = resolve_scenario_type(requested, overrides).value

    start_year = start_year if start_year is not None else DEFAULT_START_YEAR
    end_year = end_year if end_year is not None else DEFAULT_END_YEAR
    logging.getLogger(PROJECTION_LOGGER).info(f"Scenario '{scenario_label}': {params.model_dump()}")

    reference = load_reference_data()
    logging.getLogger(PERFORMANCE_LOGGER).info("Reference data loaded")
    return run_projection(start_year, end_year, params, reference)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the cohort projection CLI."""
    args = parse_arguments(argv)
    initialize_logging(debug=args.debug, log_dir=Path(args.log_dir))

    try:
        result = execute(args)
    except InvalidParameterError as e:
        logger.error(f"Invalid parameters: {e}")
        print(f"Invalid parameters: {e}", file=sys.stderr)
        return EXIT_INVALID_PARAMETERS
    except (DataReadError, ConfigLoadError) as e:
        logger.error(f"Could not load input data: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DATA_ERROR

    if args.output_dir:
        try:
            save_results(result, Path(args.output_dir))
        except OSError as e:
            logger.error(f"Could not write results to {args.output_dir}: {e}", exc_info=True)
            return EXIT_DATA_ERROR

    print_overview(result)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
