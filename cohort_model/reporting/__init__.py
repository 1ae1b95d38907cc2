from cohort_model.reporting.advisory import format_advisory_prompt, request_advisory
from cohort_model.reporting.metrics import EconomicMetrics, calculate_economic_metrics

__all__ = ["EconomicMetrics", "calculate_economic_metrics", "format_advisory_prompt", "request_advisory"]
