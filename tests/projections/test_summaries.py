# tests/projections/test_summaries.py

import pytest

from cohort_model.projections.runner import project
from cohort_model.projections.summaries import AGE_BAND, build_population_frame, build_summary_frame
from cohort_model.state.schema import POPULATION_FRAME_COLUMNS, SUMMARY_COLUMNS
from cohort_model.state.snapshot import N_AGES


@pytest.fixture
def records(reference, baseline_params):
    return project(2024, 2028, baseline_params, reference)


def test_summary_frame_has_one_row_per_year(records):
    df = build_summary_frame(records)
    assert list(df.columns) == SUMMARY_COLUMNS
    assert df["year"].tolist() == [2024, 2025, 2026, 2027, 2028]
    assert df.loc[0, "total_population"] == records[0].total_population
    assert df.loc[4, "sustainability_index"] == records[4].economic.sustainability_index


def test_population_frame_is_long_format(records):
    df = build_population_frame(records)
    assert list(df.columns) == POPULATION_FRAME_COLUMNS
    assert len(df) == len(records) * N_AGES
    totals = df.groupby("year")["total"].sum()
    assert totals[2026] == records[2].total_population


def test_population_frame_age_bands(records):
    df = build_population_frame(records, retirement_age=66)
    bands = df[df["year"] == 2024].groupby(AGE_BAND)["total"].sum()
    assert bands["child"] == records[0].child_population
    assert bands["working"] == records[0].working_age_population
    assert bands["retired"] == records[0].retired_population


def test_empty_inputs_give_empty_frames():
    assert build_summary_frame([]).empty
    assert list(build_summary_frame([]).columns) == SUMMARY_COLUMNS
    assert AGE_BAND in build_population_frame([], retirement_age=66).columns
