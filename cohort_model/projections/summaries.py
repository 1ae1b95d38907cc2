# cohort_model/projections/summaries.py
"""
Tabular views of a projection's YearRecord series.

## QuickStart

```python
from cohort_model.projections.runner import project
from cohort_model.projections.summaries import build_population_frame, build_summary_frame

records = project(2024, 2060, params, ref)
summary = build_summary_frame(records)
summary.set_index("year")["sustainability_index"].plot()

pyramid = build_population_frame(records, retirement_age=params.retirement_age)
pyramid[pyramid["year"] == 2060].groupby("age_band")["total"].sum()
```
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from cohort_model.state.age import categorize_age
from cohort_model.state.schema import (
    ACTUAL_PENSIONERS,
    ACTUAL_WORKFORCE,
    AGE,
    CHILD_POPULATION,
    GDP_PROXY,
    HEALTHCARE_COST_PER_WORKER,
    LABOR_UTILIZATION_RATE,
    MEDIAN_AGE,
    OLD_AGE_DEPENDENCY_RATIO,
    POPULATION_FRAME_COLUMNS,
    PUBLIC_HEALTHCARE_COST,
    RETIRED_POPULATION,
    SS_BALANCE,
    SS_BALANCE_PER_WORKER,
    SUMMARY_COLUMNS,
    SUMMARY_YEAR,
    SUSTAINABILITY_INDEX,
    TOTAL_BURDEN_PER_WORKER,
    TOTAL_CONTRIBUTIONS,
    TOTAL_HEALTHCARE_COST,
    TOTAL_PENSION_PAYMENTS,
    TOTAL_POPULATION,
    WORKING_AGE_POPULATION,
    YEAR,
)

logger = logging.getLogger(__name__)

AGE_BAND = "age_band"


def _summary_row(record) -> dict:
    eco = record.economic
    return {
        SUMMARY_YEAR: record.year,
        TOTAL_POPULATION: record.total_population,
        CHILD_POPULATION: record.child_population,
        WORKING_AGE_POPULATION: record.working_age_population,
        RETIRED_POPULATION: record.retired_population,
        OLD_AGE_DEPENDENCY_RATIO: record.old_age_dependency_ratio,
        MEDIAN_AGE: record.median_age,
        ACTUAL_WORKFORCE: eco.actual_workforce,
        LABOR_UTILIZATION_RATE: eco.labor_utilization_rate,
        ACTUAL_PENSIONERS: eco.actual_pensioners,
        TOTAL_CONTRIBUTIONS: eco.total_contributions,
        TOTAL_PENSION_PAYMENTS: eco.total_pension_payments,
        SS_BALANCE: eco.ss_balance,
        SS_BALANCE_PER_WORKER: eco.ss_balance_per_worker,
        TOTAL_HEALTHCARE_COST: eco.total_healthcare_cost,
        PUBLIC_HEALTHCARE_COST: eco.public_healthcare_cost,
        HEALTHCARE_COST_PER_WORKER: eco.healthcare_cost_per_worker,
        TOTAL_BURDEN_PER_WORKER: eco.total_burden_per_worker,
        GDP_PROXY: eco.gdp_proxy,
        SUSTAINABILITY_INDEX: eco.sustainability_index,
    }


def build_summary_frame(records: Iterable) -> pd.DataFrame:
    """One row per projected year with every aggregate and economic field."""
    rows = [_summary_row(r) for r in records]
    if not rows:
        logger.warning("No year records provided; returning empty summary")
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def build_population_frame(records: Iterable, retirement_age: Optional[int] = None) -> pd.DataFrame:
    """
    Long frame of every cohort of every year: year, age, male, female, total.

    With ``retirement_age`` an ``age_band`` column (child/working/retired)
    is added.
    """
    frames: List[pd.DataFrame] = []
    for record in records:
        df = record.snapshot.to_frame()
        df.insert(0, YEAR, record.year)
        frames.append(df)

    columns = list(POPULATION_FRAME_COLUMNS)
    if not frames:
        logger.warning("No year records provided; returning empty population frame")
        if retirement_age is not None:
            columns.append(AGE_BAND)
        return pd.DataFrame(columns=columns)

    population = pd.concat(frames, ignore_index=True)[columns]
    if retirement_age is not None:
        population[AGE_BAND] = population[AGE].map(
            lambda age: categorize_age(int(age), retirement_age).value
        )
    return population
