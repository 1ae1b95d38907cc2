# cohort_model/config/models.py
"""
Pydantic models for the simulation parameters and the economic assumptions
loaded from YAML files (e.g., economics.yaml).
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cohort_model.state.schema import Sex

logger = logging.getLogger(__name__)

# --- Parameter bounds (inclusive) ---

RETIREMENT_AGE_BOUNDS = (55, 75)
FERTILITY_RATE_BOUNDS = (0.0, 4.0)
NET_MIGRATION_BOUNDS = (-200_000, 500_000)
MORTALITY_IMPROVEMENT_BOUNDS = (0.0, 0.05)
ENTRY_AGE_SHIFT_BOUNDS = (-3, 5)
UNEMPLOYMENT_ADJUSTMENT_BOUNDS = (-0.10, 0.15)

MAX_PROJECTION_SPAN = 200


class MortalityImprovement(BaseModel):
    """Annual rate of decrease in age-specific mortality, by sex."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    male: float = Field(
        0.010,
        ge=MORTALITY_IMPROVEMENT_BOUNDS[0],
        le=MORTALITY_IMPROVEMENT_BOUNDS[1],
        description="Annual improvement rate for males (e.g., 0.01 for 1%)",
    )
    female: float = Field(
        0.008,
        ge=MORTALITY_IMPROVEMENT_BOUNDS[0],
        le=MORTALITY_IMPROVEMENT_BOUNDS[1],
        description="Annual improvement rate for females (e.g., 0.008 for 0.8%)",
    )

    def for_sex(self, sex: Sex) -> float:
        return self.male if Sex(sex) is Sex.MALE else self.female


class SimulationParameters(BaseModel):
    """Caller-supplied assumptions for one projection run. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    retirement_age: int = Field(
        66,
        ge=RETIREMENT_AGE_BOUNDS[0],
        le=RETIREMENT_AGE_BOUNDS[1],
        description="First age counted as retired",
    )
    fertility_rate: float = Field(
        1.40,
        ge=FERTILITY_RATE_BOUNDS[0],
        le=FERTILITY_RATE_BOUNDS[1],
        description="Total fertility rate (children per woman)",
    )
    net_migration: int = Field(
        110_000,
        ge=NET_MIGRATION_BOUNDS[0],
        le=NET_MIGRATION_BOUNDS[1],
        description="Net annual migration (persons/year, can be negative)",
    )
    mortality_improvement: MortalityImprovement = Field(default_factory=MortalityImprovement)
    workforce_entry_age_shift: int = Field(
        0,
        ge=ENTRY_AGE_SHIFT_BOUNDS[0],
        le=ENTRY_AGE_SHIFT_BOUNDS[1],
        description="Years by which labour-market entry is delayed (negative = earlier)",
    )
    unemployment_adjustment: float = Field(
        0.0,
        ge=UNEMPLOYMENT_ADJUSTMENT_BOUNDS[0],
        le=UNEMPLOYMENT_ADJUSTMENT_BOUNDS[1],
        description="Relative reduction of employment rates (negative = more employment)",
    )


# --- Economic assumptions (economics.yaml) ---


class SocialSecurityAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_salary: float = Field(..., gt=0.0, description="Average gross annual salary, base year")
    contribution_rate: float = Field(
        ..., ge=0.0, le=1.0, description="Combined employer + employee contribution rate"
    )
    average_pension: float = Field(..., ge=0.0, description="Average annual pension, base year")
    wage_growth_rate: float = Field(0.0, ge=-0.05, le=0.10)
    pension_indexation_rate: float = Field(0.0, ge=-0.05, le=0.10)


class HealthcareAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_cost_per_capita: float = Field(..., ge=0.0, description="Adult per-capita cost, base year")
    cost_growth_rate: float = Field(0.0, ge=-0.05, le=0.10)
    public_share: float = Field(..., ge=0.0, le=1.0, description="Publicly funded share of healthcare")


class GdpAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    gdp_per_worker: float = Field(..., gt=0.0, description="Output per employed person, base year")


class EconomicAssumptions(BaseModel):
    """The root model for economics.yaml."""

    model_config = ConfigDict(frozen=True)

    social_security: SocialSecurityAssumptions
    healthcare: HealthcareAssumptions
    gdp: GdpAssumptions
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_pension_below_salary(self) -> "EconomicAssumptions":
        """Warn when the average pension exceeds the average salary."""
        ss = self.social_security
        if ss.average_pension > ss.average_salary:
            logger.warning(
                f"Average pension ({ss.average_pension:,.0f}) exceeds average salary "
                f"({ss.average_salary:,.0f}). Check economics config."
            )
        return self
