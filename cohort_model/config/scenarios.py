# cohort_model/config/scenarios.py
"""
Scenario presets.

Each preset bundles the demographic and labour-market assumptions of a
projection variant (Eurostat EUROPOP2023 / UN WPP 2024 / INE Portugal style).
Retirement age is never part of a preset; it stays caller-controlled.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from cohort_model.config.models import MortalityImprovement, SimulationParameters
from cohort_model.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


class ScenarioType(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ScenarioPreset:
    name: str
    description: str
    fertility_rate: float
    net_migration: int
    mortality_improvement: MortalityImprovement
    workforce_entry_age_shift: int
    unemployment_adjustment: float

    def as_parameters(self, retirement_age: int) -> Dict[str, Any]:
        return {
            "retirement_age": retirement_age,
            "fertility_rate": self.fertility_rate,
            "net_migration": self.net_migration,
            "mortality_improvement": self.mortality_improvement,
            "workforce_entry_age_shift": self.workforce_entry_age_shift,
            "unemployment_adjustment": self.unemployment_adjustment,
        }


SCENARIO_PRESETS: Dict[ScenarioType, ScenarioPreset] = {
    ScenarioType.LOW: ScenarioPreset(
        name="Low",
        description="Pessimistic: lower fertility, reduced migration, slower mortality improvement",
        fertility_rate=1.20,
        net_migration=50_000,
        mortality_improvement=MortalityImprovement(male=0.005, female=0.004),
        workforce_entry_age_shift=1,
        unemployment_adjustment=0.05,
    ),
    ScenarioType.MEDIUM: ScenarioPreset(
        name="Medium",
        description="Baseline: current trends continue (INE 2024)",
        fertility_rate=1.40,
        net_migration=110_000,
        mortality_improvement=MortalityImprovement(male=0.010, female=0.008),
        workforce_entry_age_shift=0,
        unemployment_adjustment=0.0,
    ),
    ScenarioType.HIGH: ScenarioPreset(
        name="High",
        description="Optimistic: higher fertility, strong migration, faster mortality improvement",
        fertility_rate=1.77,
        net_migration=150_000,
        mortality_improvement=MortalityImprovement(male=0.015, female=0.012),
        workforce_entry_age_shift=-1,
        unemployment_adjustment=-0.03,
    ),
}

DEFAULT_RETIREMENT_AGE = 66


def build_parameters(
    scenario: ScenarioType = ScenarioType.MEDIUM,
    retirement_age: int = DEFAULT_RETIREMENT_AGE,
    overrides: Optional[Mapping[str, Any]] = None,
) -> SimulationParameters:
    """
    Resolve a scenario tag (plus optional overrides) into validated parameters.

    ``CUSTOM`` starts from the model defaults; every other tag starts from its
    preset bundle. Overrides are applied last.

    Raises:
        InvalidParameterError: If the resolved parameters are out of bounds.
    """
    scenario = ScenarioType(scenario)
    if scenario is ScenarioType.CUSTOM:
        values: Dict[str, Any] = {"retirement_age": retirement_age}
    else:
        values = SCENARIO_PRESETS[scenario].as_parameters(retirement_age)

    if overrides:
        overrides = dict(overrides)
        improvement = overrides.get("mortality_improvement")
        current = values.get("mortality_improvement")
        if isinstance(improvement, Mapping) and isinstance(current, MortalityImprovement):
            # partial by-sex override keeps the preset's other rate
            overrides["mortality_improvement"] = {**current.model_dump(), **improvement}
        values.update(overrides)
        logger.debug(f"Scenario '{scenario.value}' overrides applied: {sorted(overrides)}")

    try:
        return SimulationParameters(**values)
    except ValidationError as e:
        raise InvalidParameterError(
            f"Invalid parameters for scenario '{scenario.value}': {e}", errors=e.errors()
        ) from e


def resolve_scenario_type(scenario: ScenarioType, overrides: Optional[Mapping[str, Any]]) -> ScenarioType:
    """Any manual override of a preset turns the run into a custom one."""
    scenario = ScenarioType(scenario)
    if overrides and any(k != "retirement_age" for k in overrides):
        return ScenarioType.CUSTOM
    return scenario
