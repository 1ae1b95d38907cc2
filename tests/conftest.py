# tests/conftest.py
"""Shared fixtures: bundled reference data and baseline parameters."""

import pytest

from cohort_model.config.models import MortalityImprovement, SimulationParameters
from cohort_model.data.readers import load_reference_data


@pytest.fixture(scope="session")
def reference():
    """Bundled reference tables; read-only, so one copy serves every test."""
    return load_reference_data()


@pytest.fixture
def baseline_params() -> SimulationParameters:
    return SimulationParameters(
        retirement_age=66,
        fertility_rate=1.40,
        net_migration=110_000,
        mortality_improvement=MortalityImprovement(male=0.010, female=0.008),
        workforce_entry_age_shift=0,
        unemployment_adjustment=0.0,
    )


@pytest.fixture
def no_growth_params() -> SimulationParameters:
    """Zero fertility and zero migration: the population can only shrink."""
    return SimulationParameters(fertility_rate=0.0, net_migration=0)
