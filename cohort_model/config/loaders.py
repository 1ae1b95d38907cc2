import logging
import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from cerberus import Validator
from pydantic import ValidationError

from cohort_model.config.models import EconomicAssumptions, SimulationParameters
from cohort_model.config.scenarios import (
    DEFAULT_RETIREMENT_AGE,
    ScenarioType,
    build_parameters,
    resolve_scenario_type,
)
from cohort_model.exceptions import ConfigLoadError, InvalidParameterError

# Configure logger for this module
logger = logging.getLogger(__name__)

SCENARIO_FILE_SCHEMA: Dict[str, Any] = {
    "extends": {"type": "string", "required": False},
    "name": {"type": "string", "required": False},
    "description": {"type": "string", "required": False},
    "scenario": {
        "type": "string",
        "required": False,
        "allowed": [s.value for s in ScenarioType],
    },
    "parameters": {
        "type": "dict",
        "required": False,
        "schema": {
            "retirement_age": {"type": "integer"},
            "fertility_rate": {"type": "number"},
            "net_migration": {"type": "integer"},
            "mortality_improvement": {
                "type": "dict",
                "schema": {
                    "male": {"type": "number"},
                    "female": {"type": "number"},
                },
            },
            "workforce_entry_age_shift": {"type": "integer"},
            "unemployment_adjustment": {"type": "number"},
        },
    },
    "projection": {
        "type": "dict",
        "required": False,
        "schema": {
            "start_year": {"type": "integer"},
            "end_year": {"type": "integer"},
        },
    },
}


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path object pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    logger.debug(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e
    except OSError as e:
        raise ConfigLoadError(f"Could not read configuration file {config_path}") from e

    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.debug(f"Successfully loaded configuration from {config_path}")
    return config_data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge override into base and return the result.
    """
    for key, val in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(val, dict):
            base[key] = deep_merge(base[key], val)
        else:
            base[key] = deepcopy(val)
    return base


def load_with_extends(path: Path, _seen: Optional[set] = None) -> Dict[str, Any]:
    """Load a YAML file, resolving an ``extends`` chain relative to its directory."""
    path = Path(path).resolve()
    seen = set() if _seen is None else _seen
    if path in seen:
        raise ConfigLoadError(f"Circular extends detected in '{path}'")
    seen.add(path)

    cfg = load_yaml_config(path)
    parent = cfg.get("extends")
    overrides = {k: v for k, v in cfg.items() if k != "extends"}
    if not parent:
        return overrides
    parent_fp = Path(os.path.join(path.parent, parent))
    if not parent_fp.is_file():
        raise ConfigLoadError(f"Parent config '{parent}' not found for {path}")
    return deep_merge(load_with_extends(parent_fp, seen), overrides)


@dataclass(frozen=True)
class ScenarioConfig:
    """A scenario file resolved into validated parameters and a projection window."""

    name: str
    scenario: ScenarioType
    parameters: SimulationParameters
    start_year: Optional[int] = None
    end_year: Optional[int] = None


def load_scenario_file(path: Path) -> ScenarioConfig:
    """
    Load a scenario YAML (with ``extends``), validate its structure, and resolve
    the preset tag plus overrides into SimulationParameters.

    Raises:
        ConfigLoadError: On unreadable files or schema violations.
        InvalidParameterError: If the resolved parameters are out of bounds.
    """
    path = Path(path)
    config_data = load_with_extends(path)

    v = Validator(SCENARIO_FILE_SCHEMA)
    if not v.validate(config_data):
        raise ConfigLoadError(f"Scenario validation failed for {path}: {v.errors}")

    overrides = dict(config_data.get("parameters") or {})
    retirement_age = overrides.pop("retirement_age", DEFAULT_RETIREMENT_AGE)
    requested = ScenarioType(config_data.get("scenario", ScenarioType.MEDIUM.value))
    parameters = build_parameters(requested, retirement_age=retirement_age, overrides=overrides)
    scenario = resolve_scenario_type(requested, overrides)

    projection = config_data.get("projection") or {}
    result = ScenarioConfig(
        name=config_data.get("name", path.stem),
        scenario=scenario,
        parameters=parameters,
        start_year=projection.get("start_year"),
        end_year=projection.get("end_year"),
    )
    logger.info(f"Loaded scenario '{result.name}' ({result.scenario.value}) from {path}")
    return result


def load_economic_assumptions(config_path: Path) -> EconomicAssumptions:
    """Load and validate an economics YAML file."""
    config_data = load_yaml_config(config_path)
    try:
        return EconomicAssumptions(**config_data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid economic assumptions in {config_path}: {e}") from e


def parse_parameters(values: Dict[str, Any]) -> SimulationParameters:
    """Validate a plain mapping of parameters."""
    try:
        return SimulationParameters(**values)
    except ValidationError as e:
        raise InvalidParameterError(f"Invalid simulation parameters: {e}", errors=e.errors()) from e


# Expose for import
__all__ = [
    "load_yaml_config",
    "load_with_extends",
    "load_scenario_file",
    "load_economic_assumptions",
    "parse_parameters",
    "deep_merge",
    "ScenarioConfig",
]
