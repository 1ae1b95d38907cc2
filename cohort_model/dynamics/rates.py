# cohort_model/dynamics/rates.py
"""
Demographic rate functions: mortality, fertility, migration weights,
employment rates and healthcare cost multipliers.

Every function is pure: it reads only the ReferenceData it is given and its
arguments. Ages outside a table's coverage resolve to 0.0 instead of
raising.

## QuickStart

```python
from cohort_model.data import load_reference_data
from cohort_model.config import MortalityImprovement
from cohort_model.dynamics.rates import mortality_probability, migration_weight
from cohort_model.state.schema import Sex

ref = load_reference_data()
q = mortality_probability(ref, age=80, sex=Sex.FEMALE, years_elapsed=10,
                          improvement=MortalityImprovement())
w = migration_weight(ref, age=27, sex=Sex.MALE)
```
"""

import logging
from typing import Sequence

import numpy as np

from cohort_model.config.models import MortalityImprovement
from cohort_model.data.readers import AgeBandValue, ReferenceData
from cohort_model.state.schema import FERTILE_MAX_AGE, FERTILE_MIN_AGE, MAX_AGE, WORKING_MIN_AGE, Sex

logger = logging.getLogger(__name__)


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return float(min(max(value, lo), hi))


def _band_value(bands: Sequence[AgeBandValue], age: int) -> float:
    for band in bands:
        if band.contains(age):
            return band.value
    return 0.0


def mortality_probability(
    reference: ReferenceData,
    age: int,
    sex: Sex,
    years_elapsed: int,
    improvement: MortalityImprovement,
) -> float:
    """
    Annual death probability (qx) with mortality improvement applied.

    ``base * (1 - rate) ** years_elapsed``, clamped to [0, 1]. The terminal
    bucket keeps its table value so it can never become effectively immortal.
    """
    if age < 0:
        return 0.0
    table_age = min(age, MAX_AGE)
    base_qx = float(reference.qx(sex)[table_age])
    if table_age >= MAX_AGE:
        return _clamp(base_qx)
    rate = improvement.for_sex(sex)
    improved_qx = base_qx * (1.0 - rate) ** years_elapsed
    return _clamp(improved_qx)


def fertility_rate(reference: ReferenceData, age: int) -> float:
    """Births per woman per year at ``age``; zero outside 15-49."""
    if age < FERTILE_MIN_AGE or age > FERTILE_MAX_AGE:
        return 0.0
    return float(reference.asfr[age])


def scaled_fertility_rate(reference: ReferenceData, age: int, total_fertility_rate: float) -> float:
    """ASFR rescaled to the requested TFR, keeping the table's age shape."""
    baseline = reference.constants.baseline_total_fertility_rate
    return fertility_rate(reference, age) * (total_fertility_rate / baseline)


def migration_weight(reference: ReferenceData, age: int, sex: Sex) -> float:
    """
    Share of the sex's net migration allocated to a single ``age``.

    Band weights are normalised by their sum for the sex, then divided evenly
    across the ages the band spans, so the weights over all ages sum to 1.
    """
    bands = reference.migration_profile[Sex(sex)]
    total_weight = sum(band.value for band in bands)
    if total_weight <= 0:
        return 0.0
    for band in bands:
        if band.contains(age):
            return (band.value / total_weight) / band.span
    return 0.0


def employment_rate(
    reference: ReferenceData,
    age: int,
    entry_age_shift: int = 0,
    unemployment_adjustment: float = 0.0,
) -> float:
    """Share of ``age`` in employment, after entry-age shift and unemployment adjustment."""
    if age < 0 or age > MAX_AGE:
        return 0.0
    effective_age = max(WORKING_MIN_AGE, age - entry_age_shift)
    base_rate = _band_value(reference.employment_rates, effective_age)
    return _clamp(base_rate * (1.0 - unemployment_adjustment))


def healthcare_multiplier(reference: ReferenceData, age: int) -> float:
    """Per-capita healthcare cost relative to the adult baseline."""
    if age < 0 or age > MAX_AGE:
        return 0.0
    return _band_value(reference.healthcare_multipliers, age)


# --- Age-indexed vectors (one entry per age 0..MAX_AGE) ---


def mortality_vector(
    reference: ReferenceData, sex: Sex, years_elapsed: int, improvement: MortalityImprovement
) -> np.ndarray:
    return np.array(
        [mortality_probability(reference, age, sex, years_elapsed, improvement) for age in range(MAX_AGE + 1)]
    )


def migration_weight_vector(reference: ReferenceData, sex: Sex) -> np.ndarray:
    return np.array([migration_weight(reference, age, sex) for age in range(MAX_AGE + 1)])


def employment_vector(
    reference: ReferenceData, entry_age_shift: int = 0, unemployment_adjustment: float = 0.0
) -> np.ndarray:
    return np.array(
        [
            employment_rate(reference, age, entry_age_shift, unemployment_adjustment)
            for age in range(MAX_AGE + 1)
        ]
    )


def healthcare_vector(reference: ReferenceData) -> np.ndarray:
    return np.array([healthcare_multiplier(reference, age) for age in range(MAX_AGE + 1)])
