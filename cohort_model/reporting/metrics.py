# cohort_model/reporting/metrics.py
"""
Economic metrics for one population snapshot: workforce, social-security
balance, healthcare cost, GDP proxy and the sustainability index.

Metrics are recomputed from scratch every year; nothing carries over.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from cohort_model.config.models import EconomicAssumptions
from cohort_model.data.readers import ReferenceData
from cohort_model.dynamics.rates import employment_vector, healthcare_vector
from cohort_model.state.snapshot import PopulationSnapshot

logger = logging.getLogger(__name__)

# Fiscal breaking point: burden equal to 40% of the GDP proxy scores 0
FISCAL_BREAKING_POINT_SHARE = 0.40


@dataclass(frozen=True)
class EconomicMetrics:
    """Derived economic indicators for a single simulated year (EUR)."""

    actual_workforce: float
    working_age_population: int
    # workforce / working-age population. Can exceed 1.0: post-retirement
    # workers count in the numerator but not in the denominator.
    labor_utilization_rate: float
    actual_pensioners: float
    total_contributions: float
    total_pension_payments: float
    ss_balance: float
    ss_deficit: float
    ss_balance_per_worker: float
    total_healthcare_cost: float
    public_healthcare_cost: float
    healthcare_cost_per_worker: float
    total_burden_per_worker: float
    gdp_proxy: float
    sustainability_index: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def growth_factor(rate: float, years_elapsed: int) -> float:
    """Compound factor ``(1 + rate) ** years_elapsed``."""
    return (1.0 + rate) ** years_elapsed


def sustainability_index(ss_deficit: float, public_healthcare_cost: float, gdp_proxy: float) -> float:
    """
    ``100 * (1 - burden / (0.40 * gdp_proxy))`` clamped to [0, 100].

    A non-positive GDP proxy scores 0 (critical).
    """
    if gdp_proxy <= 0:
        return 0.0
    burden = ss_deficit + public_healthcare_cost
    index = 100.0 * (1.0 - burden / (gdp_proxy * FISCAL_BREAKING_POINT_SHARE))
    return float(min(max(index, 0.0), 100.0))


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def calculate_economic_metrics(
    reference: ReferenceData,
    snapshot: PopulationSnapshot,
    retirement_age: int,
    years_elapsed: int,
    entry_age_shift: int = 0,
    unemployment_adjustment: float = 0.0,
    assumptions: Optional[EconomicAssumptions] = None,
) -> EconomicMetrics:
    """
    Compute the year's economic metrics from a snapshot.

    Args:
        reference: Reference tables (employment rates, healthcare multipliers).
        snapshot: Population for the year.
        retirement_age: First age counted as retired.
        years_elapsed: Years since the projection start, for the growth factors.
        entry_age_shift: Delay (years) of labour-market entry.
        unemployment_adjustment: Relative reduction of employment rates.
        assumptions: Economic assumptions; defaults to the reference set.

    Returns:
        EconomicMetrics for the year.
    """
    assumptions = assumptions or reference.economics
    ss = assumptions.social_security
    hc = assumptions.healthcare
    child_limit = reference.constants.child_age_limit

    totals = snapshot.total.astype(float)
    employment = employment_vector(reference, entry_age_shift, unemployment_adjustment)
    ages = np.arange(totals.size)
    working_mask = (ages >= child_limit) & (ages < retirement_age)
    retired_mask = ages >= retirement_age

    working_age_population = int(totals[working_mask].sum())
    employed = totals * employment
    actual_workforce = float(employed[working_mask].sum() + employed[retired_mask].sum())
    actual_pensioners = float((totals[retired_mask] * (1.0 - employment[retired_mask])).sum())

    wage_factor = growth_factor(ss.wage_growth_rate, years_elapsed)
    pension_factor = growth_factor(ss.pension_indexation_rate, years_elapsed)
    healthcare_factor = growth_factor(hc.cost_growth_rate, years_elapsed)

    total_contributions = actual_workforce * ss.average_salary * wage_factor * ss.contribution_rate
    total_pension_payments = actual_pensioners * ss.average_pension * pension_factor
    ss_balance = total_contributions - total_pension_payments
    ss_deficit = max(0.0, -ss_balance)

    total_healthcare_cost = float(
        (totals * hc.base_cost_per_capita * healthcare_vector(reference) * healthcare_factor).sum()
    )
    public_healthcare_cost = total_healthcare_cost * hc.public_share

    gdp_proxy = actual_workforce * assumptions.gdp.gdp_per_worker * wage_factor

    return EconomicMetrics(
        actual_workforce=actual_workforce,
        working_age_population=working_age_population,
        labor_utilization_rate=_safe_ratio(actual_workforce, working_age_population),
        actual_pensioners=actual_pensioners,
        total_contributions=total_contributions,
        total_pension_payments=total_pension_payments,
        ss_balance=ss_balance,
        ss_deficit=ss_deficit,
        ss_balance_per_worker=_safe_ratio(ss_balance, actual_workforce),
        total_healthcare_cost=total_healthcare_cost,
        public_healthcare_cost=public_healthcare_cost,
        healthcare_cost_per_worker=_safe_ratio(total_healthcare_cost, actual_workforce),
        total_burden_per_worker=_safe_ratio(ss_deficit + public_healthcare_cost, actual_workforce),
        gdp_proxy=gdp_proxy,
        sustainability_index=sustainability_index(ss_deficit, public_healthcare_cost, gdp_proxy),
    )
