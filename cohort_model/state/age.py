"""Age-band helpers for population snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from cohort_model.state.schema import WORKING_MIN_AGE
from cohort_model.state.snapshot import PopulationSnapshot


class AgeBand(Enum):
    CHILD = "child"
    WORKING = "working"
    RETIRED = "retired"


def categorize_age(age: int, retirement_age: int, child_age_limit: int = WORKING_MIN_AGE) -> AgeBand:
    if age < child_age_limit:
        return AgeBand.CHILD
    if age < retirement_age:
        return AgeBand.WORKING
    return AgeBand.RETIRED


@dataclass(frozen=True)
class AgeStructure:
    """Aggregate counts for one snapshot under a given retirement age."""

    child_population: int
    working_age_population: int
    retired_population: int
    total_population: int
    old_age_dependency_ratio: float
    median_age: int


def median_age(snapshot: PopulationSnapshot) -> int:
    """First age at which the cumulative population reaches half the total."""
    totals = snapshot.total
    population = int(totals.sum())
    if population == 0:
        return 0
    cumulative = np.cumsum(totals)
    return int(np.argmax(cumulative >= population / 2))


def summarize_age_structure(
    snapshot: PopulationSnapshot,
    retirement_age: int,
    child_age_limit: int = WORKING_MIN_AGE,
) -> AgeStructure:
    totals = snapshot.total
    child = int(totals[:child_age_limit].sum())
    working = int(totals[child_age_limit:retirement_age].sum())
    retired = int(totals[retirement_age:].sum())
    dependency = (retired / working) * 100 if working > 0 else 0.0
    return AgeStructure(
        child_population=child,
        working_age_population=working,
        retired_population=retired,
        total_population=child + working + retired,
        old_age_dependency_ratio=dependency,
        median_age=median_age(snapshot),
    )
