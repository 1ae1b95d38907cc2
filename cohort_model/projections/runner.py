# cohort_model/projections/runner.py
"""
Projection driver: validates a run, then iterates the year loop and
assembles the ordered series of YearRecords.

Each year, in order: summarize the current snapshot, compute its economic
metrics, append the YearRecord, evolve to the next snapshot, check the
population balance. Parameter problems abort the run before any of this
happens; balance problems only add diagnostics.

## QuickStart

```python
from cohort_model.config import build_parameters, ScenarioType
from cohort_model.data import load_reference_data
from cohort_model.projections.runner import project, run_projection

ref = load_reference_data()
params = build_parameters(ScenarioType.MEDIUM, retirement_age=66)

records = project(2024, 2100, params, ref)
print(records[-1].year, records[-1].total_population, records[-1].economic.sustainability_index)

result = run_projection(2024, 2050, {"fertility_rate": 1.6, "net_migration": 80000}, ref)
print(result.state, len(result.discrepancies))
```
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from cohort_model.config.loaders import parse_parameters
from cohort_model.config.models import MAX_PROJECTION_SPAN, EconomicAssumptions, SimulationParameters
from cohort_model.data.readers import ReferenceData
from cohort_model.dynamics.cohort import evolve_population
from cohort_model.exceptions import InvalidParameterError
from cohort_model.projections.validation import (
    DEFAULT_BALANCE_TOLERANCE,
    BalanceDiscrepancy,
    BalanceReport,
    check_balance,
)
from cohort_model.reporting.metrics import EconomicMetrics, calculate_economic_metrics
from cohort_model.state.age import summarize_age_structure
from cohort_model.state.snapshot import PopulationSnapshot
from logging_config import PERFORMANCE_LOGGER, PROJECTION_LOGGER

logger = logging.getLogger(__name__)
proj_logger = logging.getLogger(PROJECTION_LOGGER)
perf_logger = logging.getLogger(PERFORMANCE_LOGGER)

ParametersLike = Union[SimulationParameters, Mapping[str, Any]]


class ProjectionState(str, Enum):
    VALIDATING = "validating"
    RUNNING = "running"
    COMPLETE = "complete"


@dataclass(frozen=True)
class YearRecord:
    """One element of the projection output. Never mutated after creation."""

    year: int
    snapshot: PopulationSnapshot
    child_population: int
    working_age_population: int
    retired_population: int
    total_population: int
    old_age_dependency_ratio: float
    median_age: int
    economic: EconomicMetrics


@dataclass
class ProjectionResult:
    """Year records plus the run's balance diagnostics and final state."""

    parameters: SimulationParameters
    records: List[YearRecord] = field(default_factory=list)
    balance: BalanceReport = field(default_factory=BalanceReport)
    state: ProjectionState = ProjectionState.VALIDATING

    @property
    def discrepancies(self) -> List[BalanceDiscrepancy]:
        return self.balance.discrepancies

    @property
    def final_snapshot(self) -> Optional[PopulationSnapshot]:
        return self.records[-1].snapshot if self.records else None

    def record_for(self, year: int) -> YearRecord:
        for record in self.records:
            if record.year == year:
                return record
        raise KeyError(f"No record for year {year}")


def validate_parameters(parameters: ParametersLike) -> SimulationParameters:
    """Re-check every parameter against its bounds; mappings are parsed first."""
    if isinstance(parameters, SimulationParameters):
        try:
            return SimulationParameters.model_validate(parameters.model_dump())
        except ValidationError as e:
            raise InvalidParameterError(f"Invalid simulation parameters: {e}", errors=e.errors()) from e
    if isinstance(parameters, Mapping):
        return parse_parameters(dict(parameters))
    raise InvalidParameterError(
        f"Parameters must be SimulationParameters or a mapping, got {type(parameters).__name__}"
    )


def validate_window(start_year: int, end_year: int, base_year: int) -> Tuple[int, int]:
    errors = []
    if start_year < base_year:
        errors.append(f"start_year {start_year} precedes base year {base_year}")
    if end_year < start_year:
        errors.append(f"end_year {end_year} precedes start_year {start_year}")
    elif end_year - start_year > MAX_PROJECTION_SPAN:
        errors.append(f"projection span {end_year - start_year} exceeds {MAX_PROJECTION_SPAN} years")
    if errors:
        raise InvalidParameterError("Invalid projection window: " + "; ".join(errors), errors=errors)
    return start_year, end_year


def build_year_record(
    year: int,
    snapshot: PopulationSnapshot,
    years_elapsed: int,
    params: SimulationParameters,
    reference: ReferenceData,
    assumptions: EconomicAssumptions,
) -> YearRecord:
    structure = summarize_age_structure(
        snapshot, params.retirement_age, reference.constants.child_age_limit
    )
    economic = calculate_economic_metrics(
        reference,
        snapshot,
        retirement_age=params.retirement_age,
        years_elapsed=years_elapsed,
        entry_age_shift=params.workforce_entry_age_shift,
        unemployment_adjustment=params.unemployment_adjustment,
        assumptions=assumptions,
    )
    return YearRecord(
        year=year,
        snapshot=snapshot,
        child_population=structure.child_population,
        working_age_population=structure.working_age_population,
        retired_population=structure.retired_population,
        total_population=structure.total_population,
        old_age_dependency_ratio=structure.old_age_dependency_ratio,
        median_age=structure.median_age,
        economic=economic,
    )


def run_projection(
    start_year: int,
    end_year: int,
    parameters: ParametersLike,
    reference: ReferenceData,
    assumptions: Optional[EconomicAssumptions] = None,
    balance_tolerance: int = DEFAULT_BALANCE_TOLERANCE,
) -> ProjectionResult:
    """
    Run one projection from the reference base population.

    Args:
        start_year: First projected year (seeded with the base population).
        end_year: Last projected year, inclusive.
        parameters: SimulationParameters or a plain mapping of them.
        reference: Reference tables for this run.
        assumptions: Economic assumptions; defaults to ``reference.economics``.
        balance_tolerance: Persons of drift tolerated per transition.

    Returns:
        ProjectionResult in the COMPLETE state.

    Raises:
        InvalidParameterError: Before any computation, if a parameter or the
            projection window is out of bounds.
    """
    proj_logger.info(f"[{ProjectionState.VALIDATING.value.upper()}] projection {start_year}-{end_year}")
    params = validate_parameters(parameters)
    validate_window(start_year, end_year, reference.constants.base_year)
    assumptions = assumptions or reference.economics

    result = ProjectionResult(parameters=params, balance=BalanceReport(tolerance=balance_tolerance))
    result.state = ProjectionState.RUNNING
    proj_logger.info(
        f"[{result.state.value.upper()}] retirement_age={params.retirement_age}, "
        f"fertility_rate={params.fertility_rate}, net_migration={params.net_migration:,}"
    )
    run_start = time.perf_counter()

    snapshot = reference.base_population
    for year in range(start_year, end_year + 1):
        years_elapsed = year - start_year
        record = build_year_record(year, snapshot, years_elapsed, params, reference, assumptions)
        result.records.append(record)
        logger.debug(
            f"[YR={year}] total={record.total_population:,} "
            f"dependency={record.old_age_dependency_ratio:.1f} median_age={record.median_age} "
            f"index={record.economic.sustainability_index:.1f}"
        )

        # the snapshot after end_year is never reported
        if year == end_year:
            break
        transition = evolve_population(reference, snapshot, years_elapsed, params)
        result.balance.add(check_balance(year, snapshot, transition, balance_tolerance))
        snapshot = transition.snapshot

    result.state = ProjectionState.COMPLETE
    elapsed = time.perf_counter() - run_start
    perf_logger.info(f"Projection {start_year}-{end_year} ({len(result.records)} years) took {elapsed:.3f}s")
    proj_logger.info(
        f"[{result.state.value.upper()}] {len(result.records)} records, "
        f"{len(result.discrepancies)} balance discrepancies, "
        f"final population {result.final_snapshot.total_population:,}"
    )
    return result


def project(
    start_year: int,
    end_year: int,
    parameters: ParametersLike,
    reference: ReferenceData,
    assumptions: Optional[EconomicAssumptions] = None,
) -> List[YearRecord]:
    """Ordered YearRecords for ``start_year..end_year``; fails fast on invalid input."""
    return run_projection(start_year, end_year, parameters, reference, assumptions).records
