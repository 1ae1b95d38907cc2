from cohort_model.config.models import EconomicAssumptions, MortalityImprovement, SimulationParameters
from cohort_model.config.scenarios import SCENARIO_PRESETS, ScenarioType, build_parameters

__all__ = [
    "EconomicAssumptions",
    "MortalityImprovement",
    "SimulationParameters",
    "SCENARIO_PRESETS",
    "ScenarioType",
    "build_parameters",
]
