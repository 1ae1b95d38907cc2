from cohort_model.projections.runner import ProjectionResult, ProjectionState, YearRecord, project, run_projection
from cohort_model.projections.summaries import build_population_frame, build_summary_frame
from cohort_model.projections.validation import BalanceDiscrepancy, check_balance

__all__ = [
    "BalanceDiscrepancy",
    "ProjectionResult",
    "ProjectionState",
    "YearRecord",
    "build_population_frame",
    "build_summary_frame",
    "check_balance",
    "project",
    "run_projection",
]
