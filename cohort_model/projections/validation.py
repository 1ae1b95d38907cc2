# cohort_model/projections/validation.py
"""
Population balance checks for each simulated transition.

A discrepancy is a soft signal: it is logged as a warning and returned to
the caller, but the projection keeps running.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cohort_model.dynamics.cohort import CohortTransition
from cohort_model.state.snapshot import PopulationSnapshot

logger = logging.getLogger(__name__)

# Absolute tolerance (persons) between expected and actual next-year totals
DEFAULT_BALANCE_TOLERANCE = 1


@dataclass(frozen=True)
class BalanceDiscrepancy:
    """Drift between the expected and actual population after one transition."""

    year: int
    previous_total: int
    births: int
    deaths: int
    net_migration: int
    expected_total: int
    actual_total: int

    @property
    def difference(self) -> int:
        return self.actual_total - self.expected_total

    def get_summary(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "previous_total": self.previous_total,
            "births": self.births,
            "deaths": self.deaths,
            "net_migration": self.net_migration,
            "expected_total": self.expected_total,
            "actual_total": self.actual_total,
            "difference": self.difference,
        }


@dataclass
class BalanceReport:
    """Discrepancies collected over a projection run."""

    tolerance: int = DEFAULT_BALANCE_TOLERANCE
    checked_years: int = 0
    discrepancies: List[BalanceDiscrepancy] = field(default_factory=list)

    @property
    def is_balanced(self) -> bool:
        return not self.discrepancies

    def add(self, discrepancy: Optional[BalanceDiscrepancy]) -> None:
        self.checked_years += 1
        if discrepancy is not None:
            self.discrepancies.append(discrepancy)


def check_balance(
    year: int,
    previous: PopulationSnapshot,
    transition: CohortTransition,
    tolerance: int = DEFAULT_BALANCE_TOLERANCE,
) -> Optional[BalanceDiscrepancy]:
    """
    Compare ``previous + births - deaths + migration`` with the new snapshot total.

    Args:
        year: Year of ``previous`` (the transition produces year + 1).
        previous: Snapshot before the transition.
        transition: Result of evolve_population.
        tolerance: Largest acceptable absolute difference, in persons.

    Returns:
        A BalanceDiscrepancy when the difference exceeds ``tolerance``, else None.
    """
    previous_total = previous.total_population
    expected = (
        previous_total
        + transition.total_births
        - transition.total_deaths
        + transition.total_migration_distributed
    )
    actual = transition.snapshot.total_population
    if abs(actual - expected) <= tolerance:
        return None

    discrepancy = BalanceDiscrepancy(
        year=year,
        previous_total=previous_total,
        births=transition.total_births,
        deaths=transition.total_deaths,
        net_migration=transition.total_migration_distributed,
        expected_total=expected,
        actual_total=actual,
    )
    logger.warning(
        f"[BALANCE YR={year}->{year + 1}] expected {expected:,} but got {actual:,} "
        f"(diff {discrepancy.difference:+,}; births={discrepancy.births:,}, "
        f"deaths={discrepancy.deaths:,}, migration={discrepancy.net_migration:,})"
    )
    return discrepancy
