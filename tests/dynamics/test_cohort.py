# tests/dynamics/test_cohort.py

import logging

import numpy as np
import pytest

from cohort_model.config.models import SimulationParameters
from cohort_model.dynamics.cohort import (
    allocate_migration,
    compute_births,
    evolve_population,
    round_half_up,
    split_births,
)
from cohort_model.dynamics.rates import migration_weight_vector, mortality_probability
from cohort_model.state.schema import MAX_AGE, Sex
from cohort_model.state.snapshot import N_AGES, PopulationSnapshot


def assert_conserved(previous, transition):
    expected = (
        previous.total_population
        + transition.total_births
        - transition.total_deaths
        + transition.total_migration_distributed
    )
    assert transition.snapshot.total_population == expected


@pytest.mark.parametrize("value, expected", [(0.49, 0), (0.5, 1), (2.5, 3), (3.4999, 3), (0.0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_split_births_uses_sex_ratio():
    assert split_births(1000, 1.05) == (512, 488)
    assert split_births(0, 1.05) == (0, 0)
    male, female = split_births(12_345, 1.05)
    assert male + female == 12_345


def test_births_scale_with_fertility(reference):
    base = compute_births(reference, reference.base_population, 1.40)
    double = compute_births(reference, reference.base_population, 2.80)
    assert base > 0
    assert abs(double - 2 * base) <= 1
    assert compute_births(reference, reference.base_population, 0.0) == 0


@pytest.mark.parametrize("total", [52_800.0, 57_200.0, 1.0, 12_345.678, -96_000.0])
def test_migration_allocation_distributes_everything(reference, total):
    migrants = allocate_migration(total, migration_weight_vector(reference, Sex.MALE))
    assert abs(int(migrants.sum()) - total) <= 1
    assert migrants[MAX_AGE] == 0


def test_migration_allocation_follows_profile(reference):
    migrants = allocate_migration(52_800.0, migration_weight_vector(reference, Sex.MALE))
    # 25-34 dominate, the elderly receive very few
    assert migrants[27] > migrants[5] > migrants[85]


@pytest.mark.integration
def test_evolution_conserves_population(reference, baseline_params):
    snapshot = reference.base_population
    for years_elapsed in range(10):
        transition = evolve_population(reference, snapshot, years_elapsed, baseline_params)
        assert_conserved(snapshot, transition)
        assert transition.total_migration_distributed == pytest.approx(baseline_params.net_migration, abs=2)
        snapshot = transition.snapshot


def test_evolution_does_not_modify_input(reference, baseline_params):
    before_male = reference.base_population.male.copy()
    transition = evolve_population(reference, reference.base_population, 0, baseline_params)
    assert np.array_equal(reference.base_population.male, before_male)
    assert transition.snapshot is not reference.base_population


def test_newborns_fill_age_zero(reference, baseline_params):
    transition = evolve_population(reference, reference.base_population, 0, baseline_params)
    assert transition.snapshot.male[0] == transition.male_births
    assert transition.snapshot.female[0] == transition.female_births
    assert transition.total_births > 0


def test_monotonic_aging_without_migration(reference):
    params = SimulationParameters(net_migration=0)
    current = reference.base_population
    nxt = evolve_population(reference, current, 5, params).snapshot
    for age in range(MAX_AGE - 1):
        q = mortality_probability(reference, age, Sex.FEMALE, 5, params.mortality_improvement)
        survivors = int(current.female[age]) - round_half_up(int(current.female[age]) * q)
        assert nxt.female[age + 1] == survivors


def test_terminal_bucket_combines_age_99_and_previous_terminal(reference):
    params = SimulationParameters(net_migration=0)
    current = reference.base_population
    nxt = evolve_population(reference, current, 0, params).snapshot
    q99 = reference.qx_male[99]
    q100 = reference.qx_male[MAX_AGE]
    from_99 = int(current.male[99]) - round_half_up(int(current.male[99]) * q99)
    from_100 = int(current.male[MAX_AGE]) - round_half_up(int(current.male[MAX_AGE]) * q100)
    assert nxt.male[MAX_AGE] == from_99 + from_100


@pytest.mark.slow
def test_terminal_bucket_stays_bounded(reference):
    """Decay of the 100+ bucket must dominate its inflow over a long horizon."""
    params = SimulationParameters(fertility_rate=0.8, net_migration=0)
    q_min = min(reference.qx_male[MAX_AGE], reference.qx_female[MAX_AGE])
    snapshot = reference.base_population
    max_inflow = 0
    terminal_start = int(snapshot.total[MAX_AGE])
    for years_elapsed in range(60):
        inflow = int(snapshot.total[MAX_AGE - 1])
        max_inflow = max(max_inflow, inflow)
        previous_terminal = int(snapshot.total[MAX_AGE])
        snapshot = evolve_population(reference, snapshot, years_elapsed, params).snapshot
        terminal = int(snapshot.total[MAX_AGE])
        assert terminal <= (1 - q_min) * previous_terminal + inflow + 1
        assert terminal <= max(terminal_start, (max_inflow + 2) / q_min)


def test_large_emigration_never_goes_negative(reference):
    params = SimulationParameters(net_migration=-200_000)
    tiny = PopulationSnapshot(male=np.full(N_AGES, 3), female=np.full(N_AGES, 3))
    transition = evolve_population(reference, tiny, 0, params)
    assert (transition.snapshot.male >= 0).all()
    assert (transition.snapshot.female >= 0).all()
    # only the people actually present can leave
    assert transition.total_migration_distributed >= -tiny.total_population
    assert_conserved(tiny, transition)


def test_zero_growth_step_only_loses_people(reference, no_growth_params):
    transition = evolve_population(reference, reference.base_population, 0, no_growth_params)
    assert transition.total_births == 0
    assert transition.total_migration_distributed == 0
    assert transition.snapshot.total_population < reference.base_population.total_population


def test_lone_centenarian_does_not_live_forever(reference):
    """qx below 0.5 would round one person's deaths to zero; the bucket must still empty."""
    assert reference.qx_female[MAX_AGE] < 0.5
    params = SimulationParameters(fertility_rate=0.0, net_migration=0)
    female = np.zeros(N_AGES, dtype=np.int64)
    female[MAX_AGE] = 1
    snapshot = PopulationSnapshot(male=np.zeros(N_AGES, dtype=np.int64), female=female)
    transition = evolve_population(reference, snapshot, 0, params)
    assert transition.total_deaths == 1
    assert transition.snapshot.total_population == 0
    assert_conserved(snapshot, transition)


def test_small_terminal_bucket_empties_without_inflow(reference):
    params = SimulationParameters(fertility_rate=0.0, net_migration=0)
    male = np.zeros(N_AGES, dtype=np.int64)
    female = np.zeros(N_AGES, dtype=np.int64)
    male[MAX_AGE], female[MAX_AGE] = 3, 2
    snapshot = PopulationSnapshot(male=male, female=female)
    for years_elapsed in range(10):
        snapshot = evolve_population(reference, snapshot, years_elapsed, params).snapshot
    assert snapshot.total_population == 0


def test_emigration_shortfall_is_reported(reference, caplog):
    params = SimulationParameters(net_migration=-200_000)
    tiny = PopulationSnapshot(male=np.full(N_AGES, 3), female=np.full(N_AGES, 3))
    with caplog.at_level(logging.DEBUG, logger="cohort_model.dynamics.cohort"):
        transition = evolve_population(reference, tiny, 0, params)
    assert transition.unapplied_migration > 0
    # requested emigration is what was applied minus what could not be
    assert transition.total_migration_distributed - transition.unapplied_migration == pytest.approx(
        -200_000, abs=2
    )
    assert "exceeded their cohorts" in caplog.text


def test_no_shortfall_under_normal_migration(reference, baseline_params):
    transition = evolve_population(reference, reference.base_population, 0, baseline_params)
    assert transition.unapplied_migration == 0
