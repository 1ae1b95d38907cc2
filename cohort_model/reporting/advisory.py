"""
Natural-language advisory for a single projected year.

The text generator is an external service injected as a plain callable
``client(prompt) -> str``. The projection never depends on it: any failure
is logged and replaced by a fixed fallback string.
"""

import logging
from typing import Callable, Optional

from cohort_model.config.models import SimulationParameters

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_FALLBACK = "Unable to generate analysis."
ERROR_FALLBACK = "Analysis unavailable due to API error."

AdvisoryClient = Callable[[str], Optional[str]]


def format_advisory_prompt(record, parameters: SimulationParameters) -> str:
    """Render the prompt for one YearRecord and the parameters that produced it."""
    economic = record.economic
    improvement = parameters.mortality_improvement
    return f"""
Act as a senior demographic and economic policy expert for Portugal.
Analyze the following simulated demographic scenario for Portugal in the year {record.year}.

Simulation Parameters:
- Retirement Age: {parameters.retirement_age}
- Fertility Rate: {parameters.fertility_rate:.2f}
- Net Migration: {parameters.net_migration:,} / year
- Mortality Improvement: {improvement.male:.1%} male, {improvement.female:.1%} female
- Workforce Entry Age Shift: {parameters.workforce_entry_age_shift:+d} years
- Unemployment Adjustment: {parameters.unemployment_adjustment:+.0%}

Current Stats:
- Total Population: {record.total_population / 1e6:.2f} Million
- Old-Age Dependency Ratio: {record.old_age_dependency_ratio:.1f}% (Retirees per 100 workers)
- Median Age: {record.median_age}
- Retired Population: {record.retired_population / 1e6:.2f} Million
- Working Population: {record.working_age_population / 1e6:.2f} Million
- Sustainability Index: {economic.sustainability_index:.0f} / 100
- Social Security Balance: {economic.ss_balance / 1e9:.1f}B EUR
- Burden per Worker: {economic.total_burden_per_worker:,.0f} EUR/year

Provide a concise, 3-sentence high-level summary of the societal and economic mood.
Then, provide 3 bullet points on the specific pressure points for the Portuguese economy (Social Security sustainability, Healthcare burden, Labor shortage, etc.).
Be realistic about the consequences of such a high dependency ratio if it is high (>50%).
""".strip()


def request_advisory(record, parameters: SimulationParameters, client: AdvisoryClient) -> str:
    """Ask the advisory service about one year. Never raises."""
    prompt = format_advisory_prompt(record, parameters)
    try:
        text = client(prompt)
    except Exception as e:
        logger.warning(f"Advisory service error for year {record.year}: {e}")
        return ERROR_FALLBACK
    if not text:
        return EMPTY_RESPONSE_FALLBACK
    return text
