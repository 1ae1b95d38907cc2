# tests/state/test_age.py

import numpy as np
import pytest

from cohort_model.state.age import AgeBand, categorize_age, median_age, summarize_age_structure
from cohort_model.state.snapshot import N_AGES, PopulationSnapshot


@pytest.mark.parametrize(
    "age, band",
    [(0, AgeBand.CHILD), (14, AgeBand.CHILD), (15, AgeBand.WORKING), (65, AgeBand.WORKING),
     (66, AgeBand.RETIRED), (100, AgeBand.RETIRED)],
)
def test_categorize_age(age, band):
    assert categorize_age(age, retirement_age=66) is band


def test_median_age_uniform_population():
    snap = PopulationSnapshot(male=np.ones(N_AGES), female=np.ones(N_AGES))
    # 202 people: cumulative reaches 101 at age 50
    assert median_age(snap) == 50


def test_median_age_empty_population():
    snap = PopulationSnapshot(male=np.zeros(N_AGES), female=np.zeros(N_AGES))
    assert median_age(snap) == 0


def test_summary_counts_and_dependency_ratio():
    male = np.zeros(N_AGES)
    male[10], male[30], male[70] = 100, 400, 100
    snap = PopulationSnapshot(male=male, female=np.zeros(N_AGES))
    structure = summarize_age_structure(snap, retirement_age=66)
    assert structure.child_population == 100
    assert structure.working_age_population == 400
    assert structure.retired_population == 100
    assert structure.total_population == 600
    assert structure.old_age_dependency_ratio == pytest.approx(25.0)
    assert structure.median_age == 30


def test_dependency_ratio_without_workers_is_zero():
    male = np.zeros(N_AGES)
    male[80] = 50
    snap = PopulationSnapshot(male=male, female=np.zeros(N_AGES))
    assert summarize_age_structure(snap, retirement_age=66).old_age_dependency_ratio == 0.0


def test_retirement_age_moves_boundary(reference):
    early = summarize_age_structure(reference.base_population, retirement_age=60)
    late = summarize_age_structure(reference.base_population, retirement_age=70)
    assert early.retired_population > late.retired_population
    assert early.total_population == late.total_population == reference.base_population.total_population
