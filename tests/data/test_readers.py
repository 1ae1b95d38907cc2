# tests/data/test_readers.py

import shutil

import numpy as np
import pytest

from cohort_model.data.readers import (
    POPULATION_FILE,
    REFERENCE_DIR,
    load_reference_data,
    parse_age_group,
)
from cohort_model.exceptions import DataReadError
from cohort_model.state.schema import MAX_AGE, Sex

BASELINE_TOTAL_2024 = 10_749_635


@pytest.fixture
def reference_copy(tmp_path):
    """A writable copy of the bundled reference directory."""
    target = tmp_path / "reference"
    shutil.copytree(REFERENCE_DIR, target)
    return target


@pytest.mark.unit
def test_base_population_total(reference):
    assert reference.base_population.total_population == BASELINE_TOTAL_2024
    assert reference.base_population.cohort(0).male_count == 43_600
    assert reference.base_population.cohort(MAX_AGE).female_count == 2_279


@pytest.mark.unit
def test_life_table_and_fertility_shapes(reference):
    assert reference.qx_male.shape == (MAX_AGE + 1,)
    assert reference.qx(Sex.FEMALE)[MAX_AGE] == pytest.approx(0.47)
    # per 1000 converted to per woman, zero outside 15-49
    assert reference.asfr[15] == pytest.approx(0.0018)
    assert reference.asfr[14] == 0.0
    assert reference.asfr[50] == 0.0


@pytest.mark.unit
def test_reference_arrays_are_read_only(reference):
    with pytest.raises(ValueError):
        reference.qx_male[0] = 0.5
    with pytest.raises(ValueError):
        reference.asfr[20] = 1.0


@pytest.mark.unit
def test_open_bands_end_at_table_limits(reference):
    last_migration = reference.migration_profile[Sex.MALE][-1]
    assert (last_migration.min_age, last_migration.max_age) == (80, MAX_AGE - 1)
    last_employment = reference.employment_rates[-1]
    assert (last_employment.min_age, last_employment.max_age) == (75, MAX_AGE)
    names = [band.name for band in reference.healthcare_multipliers]
    assert names == ["child", "adult", "young_elderly", "old_elderly", "oldest"]


@pytest.mark.unit
def test_constants_and_economics(reference):
    assert reference.constants.base_year == 2024
    assert reference.constants.sex_ratio_at_birth == pytest.approx(1.05)
    assert reference.economics.social_security.contribution_rate == pytest.approx(0.3475)


@pytest.mark.parametrize(
    "label, expected",
    [("20-24", (20, 24)), ("0-4", (0, 4)), ("80+", (80, MAX_AGE)), (" 75+ ", (75, MAX_AGE))],
)
def test_parse_age_group(label, expected):
    assert parse_age_group(label) == expected


@pytest.mark.parametrize("label", ["abc", "30-20", "20_24"])
def test_parse_age_group_rejects_bad_labels(label):
    with pytest.raises(ValueError):
        parse_age_group(label)


def test_missing_table_raises(reference_copy):
    (reference_copy / POPULATION_FILE).unlink()
    with pytest.raises(DataReadError, match="not found"):
        load_reference_data(reference_copy)


def test_population_with_missing_age_raises(reference_copy):
    path = reference_copy / POPULATION_FILE
    lines = path.read_text().splitlines()
    # drop the row for age 50
    path.write_text("\n".join(line for line in lines if not line.startswith("50,")) + "\n")
    with pytest.raises(DataReadError, match="must cover ages"):
        load_reference_data(reference_copy)


def test_life_table_probability_out_of_range_raises(reference_copy):
    path = reference_copy / "life_table.csv"
    path.write_text(path.read_text().replace("100,0.520000,0.470000", "100,1.520000,0.470000"))
    with pytest.raises(DataReadError, match=r"outside \[0, 1\]"):
        load_reference_data(reference_copy)


def test_fertility_age_outside_window_raises(reference_copy):
    path = reference_copy / "fertility_rates.csv"
    path.write_text(path.read_text() + "55,0.1\n")
    with pytest.raises(DataReadError, match="outside ages"):
        load_reference_data(reference_copy)


def test_load_from_copy_matches_bundled(reference_copy, reference):
    copy = load_reference_data(reference_copy)
    assert copy.base_population == reference.base_population
    assert np.array_equal(copy.qx_female, reference.qx_female)
