# cohort_model/state/schema.py
"""Centralized schema constants for population snapshots and year summaries.

All modules that build or read pandas frames import column names from here.
"""
from __future__ import annotations

from enum import Enum
from typing import List

# Single-year ages run 0..MAX_AGE; MAX_AGE is the open-ended "100+" bucket
MAX_AGE = 100

# Fertility window (inclusive)
FERTILE_MIN_AGE = 15
FERTILE_MAX_AGE = 49

# Youngest age counted as working-age and for employment lookups
WORKING_MIN_AGE = 15


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


# -----------------------------------------------------------------------------
# Snapshot columns
# -----------------------------------------------------------------------------
AGE = "age"
MALE = "male"
FEMALE = "female"
TOTAL = "total"
YEAR = "year"

SNAPSHOT_COLUMNS: List[str] = [AGE, MALE, FEMALE, TOTAL]
POPULATION_FRAME_COLUMNS: List[str] = [YEAR, AGE, MALE, FEMALE, TOTAL]

# -----------------------------------------------------------------------------
# Summary / reporting columns
# -----------------------------------------------------------------------------
SUMMARY_YEAR = "year"
TOTAL_POPULATION = "total_population"
CHILD_POPULATION = "child_population"
WORKING_AGE_POPULATION = "working_age_population"
RETIRED_POPULATION = "retired_population"
OLD_AGE_DEPENDENCY_RATIO = "old_age_dependency_ratio"
MEDIAN_AGE = "median_age"

ACTUAL_WORKFORCE = "actual_workforce"
LABOR_UTILIZATION_RATE = "labor_utilization_rate"
ACTUAL_PENSIONERS = "actual_pensioners"
TOTAL_CONTRIBUTIONS = "total_contributions"
TOTAL_PENSION_PAYMENTS = "total_pension_payments"
SS_BALANCE = "ss_balance"
SS_BALANCE_PER_WORKER = "ss_balance_per_worker"
TOTAL_HEALTHCARE_COST = "total_healthcare_cost"
PUBLIC_HEALTHCARE_COST = "public_healthcare_cost"
HEALTHCARE_COST_PER_WORKER = "healthcare_cost_per_worker"
TOTAL_BURDEN_PER_WORKER = "total_burden_per_worker"
GDP_PROXY = "gdp_proxy"
SUSTAINABILITY_INDEX = "sustainability_index"

SUMMARY_COLUMNS: List[str] = [
    SUMMARY_YEAR,
    TOTAL_POPULATION,
    CHILD_POPULATION,
    WORKING_AGE_POPULATION,
    RETIRED_POPULATION,
    OLD_AGE_DEPENDENCY_RATIO,
    MEDIAN_AGE,
    ACTUAL_WORKFORCE,
    LABOR_UTILIZATION_RATE,
    ACTUAL_PENSIONERS,
    TOTAL_CONTRIBUTIONS,
    TOTAL_PENSION_PAYMENTS,
    SS_BALANCE,
    SS_BALANCE_PER_WORKER,
    TOTAL_HEALTHCARE_COST,
    PUBLIC_HEALTHCARE_COST,
    HEALTHCARE_COST_PER_WORKER,
    TOTAL_BURDEN_PER_WORKER,
    GDP_PROXY,
    SUSTAINABILITY_INDEX,
]
