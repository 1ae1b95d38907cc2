# cohort_model/dynamics/cohort.py
"""
Cohort-component evolution step: advances one population snapshot by one year.

Order of operations for each year:
  1. Births from age-specific fertility of women aged 15-49, split by the
     sex ratio at birth into the new age-0 cohort.
  2. Net migration split by sex and allocated to every non-terminal age with
     a carry-forward accumulator, so the rounding loss over all ages stays
     below one person.
  3. Migrants join their cohort before mortality (mid-year arrival) and are
     thinned by the same annual probability; survivors age by one year.
  4. The terminal bucket (MAX_AGE) takes no migrants, keeps its table
     mortality and absorbs the survivors of age MAX_AGE - 1.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from cohort_model.config.models import SimulationParameters
from cohort_model.data.readers import ReferenceData
from cohort_model.dynamics.rates import migration_weight_vector, mortality_vector, scaled_fertility_rate
from cohort_model.state.schema import FERTILE_MAX_AGE, FERTILE_MIN_AGE, MAX_AGE, Sex
from cohort_model.state.snapshot import N_AGES, PopulationSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CohortTransition:
    """Next year's snapshot plus the flow counters used for balance checks."""

    snapshot: PopulationSnapshot
    male_births: int
    female_births: int
    total_deaths: int
    total_migration_distributed: int
    # requested emigrants who were not present in their cohort
    unapplied_migration: int = 0

    @property
    def total_births(self) -> int:
        return self.male_births + self.female_births


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_births(reference: ReferenceData, snapshot: PopulationSnapshot, total_fertility_rate: float) -> int:
    expected = 0.0
    for age in range(FERTILE_MIN_AGE, FERTILE_MAX_AGE + 1):
        expected += int(snapshot.female[age]) * scaled_fertility_rate(reference, age, total_fertility_rate)
    return round_half_up(expected)


def split_births(births: int, sex_ratio_at_birth: float) -> Tuple[int, int]:
    """Split births into (male, female) using males-per-female at birth."""
    male = int(math.floor(births * (sex_ratio_at_birth / (1.0 + sex_ratio_at_birth))))
    return male, births - male


def allocate_migration(total_for_sex: float, weights: np.ndarray) -> np.ndarray:
    """
    Integer migrants per age for one sex.

    The fractional remainder of each age is carried into the next age's
    share. Whatever carry is left after the last regular age is rounded onto
    the age just below the terminal bucket, which itself receives nothing.
    """
    migrants = np.zeros(N_AGES, dtype=np.int64)
    carry = 0.0
    for age in range(MAX_AGE):
        exact = total_for_sex * float(weights[age]) + carry
        whole = math.floor(exact)
        carry = exact - whole
        migrants[age] = whole
    migrants[MAX_AGE - 1] += round_half_up(carry)
    return migrants


def _advance_sex(
    counts: np.ndarray, migrants: np.ndarray, qx: np.ndarray
) -> Tuple[np.ndarray, int, int]:
    """
    Age one sex forward. Returns (next counts with age 0 left empty, deaths,
    migration actually applied).

    The terminal bucket loses at least one person a year while it is occupied
    and its qx is positive, so a small remainder cannot stay there forever.
    """
    aged = np.zeros(N_AGES, dtype=np.int64)
    deaths = 0
    applied_migration = 0

    for age in range(MAX_AGE):
        current = int(counts[age])
        # emigration cannot remove more people than the cohort holds
        pool = max(0, current + int(migrants[age]))
        cohort_deaths = min(pool, round_half_up(pool * float(qx[age])))
        aged[age + 1] += pool - cohort_deaths
        deaths += cohort_deaths
        applied_migration += pool - current

    # terminal bucket: own table mortality, no migration
    terminal = int(counts[MAX_AGE])
    terminal_qx = float(qx[MAX_AGE])
    terminal_deaths = min(terminal, round_half_up(terminal * terminal_qx))
    if terminal > 0 and terminal_qx > 0:
        terminal_deaths = max(terminal_deaths, 1)
    aged[MAX_AGE] += terminal - terminal_deaths
    deaths += terminal_deaths

    return aged, deaths, applied_migration


def evolve_population(
    reference: ReferenceData,
    snapshot: PopulationSnapshot,
    years_elapsed: int,
    params: SimulationParameters,
) -> CohortTransition:
    """Produce next year's snapshot from ``snapshot``. The input is not modified."""
    constants = reference.constants

    births = compute_births(reference, snapshot, params.fertility_rate)
    male_births, female_births = split_births(births, constants.sex_ratio_at_birth)

    male_migration_total = params.net_migration * constants.migration_male_share
    female_migration_total = params.net_migration - male_migration_total

    male_migrants = allocate_migration(male_migration_total, migration_weight_vector(reference, Sex.MALE))
    female_migrants = allocate_migration(female_migration_total, migration_weight_vector(reference, Sex.FEMALE))

    next_male, male_deaths, male_migration = _advance_sex(
        snapshot.male,
        male_migrants,
        mortality_vector(reference, Sex.MALE, years_elapsed, params.mortality_improvement),
    )
    next_female, female_deaths, female_migration = _advance_sex(
        snapshot.female,
        female_migrants,
        mortality_vector(reference, Sex.FEMALE, years_elapsed, params.mortality_improvement),
    )
    next_male[0] = male_births
    next_female[0] = female_births

    requested_migration = int(male_migrants[:MAX_AGE].sum() + female_migrants[:MAX_AGE].sum())
    applied_migration = male_migration + female_migration
    if applied_migration != requested_migration:
        logger.debug(
            f"[EVOLVE t={years_elapsed}] migration requested={requested_migration:,} "
            f"applied={applied_migration:,}: {applied_migration - requested_migration:,} emigrants "
            f"exceeded their cohorts"
        )

    transition = CohortTransition(
        snapshot=PopulationSnapshot(male=next_male, female=next_female),
        male_births=male_births,
        female_births=female_births,
        total_deaths=male_deaths + female_deaths,
        total_migration_distributed=applied_migration,
        unapplied_migration=applied_migration - requested_migration,
    )
    logger.debug(
        f"[EVOLVE t={years_elapsed}] births={transition.total_births:,} "
        f"deaths={transition.total_deaths:,} migration={transition.total_migration_distributed:,} "
        f"-> total={transition.snapshot.total_population:,}"
    )
    return transition
