# cohort_model/state/snapshot.py
"""
Immutable population snapshots.

A snapshot holds one male and one female count per single year of age,
0..MAX_AGE, where MAX_AGE is the open-ended terminal bucket. The count
arrays are copied on construction and marked read-only, so a snapshot
recorded in a projection is never copied again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List

import numpy as np
import pandas as pd

from cohort_model.state.schema import AGE, FEMALE, MALE, MAX_AGE, SNAPSHOT_COLUMNS, TOTAL

logger = logging.getLogger(__name__)

N_AGES = MAX_AGE + 1


@dataclass(frozen=True)
class Cohort:
    """Population count for one single year of age, split by sex."""

    age: int
    male_count: int
    female_count: int

    @property
    def total(self) -> int:
        return self.male_count + self.female_count


def _frozen_counts(values, label: str) -> np.ndarray:
    arr = np.array(values, dtype=np.int64)
    if arr.shape != (N_AGES,):
        raise ValueError(
            f"{label} counts must cover ages 0..{MAX_AGE} ({N_AGES} values), got shape {arr.shape}"
        )
    if (arr < 0).any():
        bad = np.flatnonzero(arr < 0).tolist()
        raise ValueError(f"{label} counts are negative at ages {bad}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PopulationSnapshot:
    """Age-by-sex population for one year. Never mutated once built."""

    male: np.ndarray
    female: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "male", _frozen_counts(self.male, MALE))
        object.__setattr__(self, "female", _frozen_counts(self.female, FEMALE))

    # --- construction -----------------------------------------------------

    @classmethod
    def from_cohorts(cls, cohorts: Iterable[Cohort]) -> "PopulationSnapshot":
        """Build a snapshot from cohorts covering every age exactly once."""
        male = np.zeros(N_AGES, dtype=np.int64)
        female = np.zeros(N_AGES, dtype=np.int64)
        seen = set()
        for cohort in cohorts:
            if not 0 <= cohort.age <= MAX_AGE:
                raise ValueError(f"Cohort age {cohort.age} outside 0..{MAX_AGE}")
            if cohort.age in seen:
                raise ValueError(f"Duplicate cohort for age {cohort.age}")
            seen.add(cohort.age)
            male[cohort.age] = cohort.male_count
            female[cohort.age] = cohort.female_count
        missing = sorted(set(range(N_AGES)) - seen)
        if missing:
            raise ValueError(f"Snapshot is missing cohorts for ages {missing}")
        return cls(male=male, female=female)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "PopulationSnapshot":
        """Build a snapshot from a frame with ``age``, ``male`` and ``female`` columns."""
        missing_cols = {AGE, MALE, FEMALE} - set(df.columns)
        if missing_cols:
            raise ValueError(f"Population frame missing columns: {sorted(missing_cols)}")
        cohorts = [
            Cohort(age=int(row[AGE]), male_count=int(row[MALE]), female_count=int(row[FEMALE]))
            for _, row in df.iterrows()
        ]
        return cls.from_cohorts(cohorts)

    # --- access -------------------------------------------------------------

    @property
    def total(self) -> np.ndarray:
        return self.male + self.female

    @property
    def total_population(self) -> int:
        return int(self.male.sum() + self.female.sum())

    def cohort(self, age: int) -> Cohort:
        return Cohort(age=age, male_count=int(self.male[age]), female_count=int(self.female[age]))

    def cohorts(self) -> List[Cohort]:
        return [self.cohort(age) for age in range(N_AGES)]

    def __iter__(self) -> Iterator[Cohort]:
        return iter(self.cohorts())

    def __len__(self) -> int:
        return N_AGES

    def __eq__(self, other) -> bool:
        if not isinstance(other, PopulationSnapshot):
            return NotImplemented
        return bool(np.array_equal(self.male, other.male) and np.array_equal(self.female, other.female))

    def __hash__(self) -> int:
        return hash((self.male.tobytes(), self.female.tobytes()))

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(
            {
                AGE: np.arange(N_AGES),
                MALE: self.male,
                FEMALE: self.female,
                TOTAL: self.total,
            }
        )
        return df[SNAPSHOT_COLUMNS]
