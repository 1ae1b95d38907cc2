# cohort_model/data/readers.py
"""
Functions for reading the static reference datasets (baseline population,
life table, fertility rates, migration profile, employment rates,
healthcare multipliers, demographic constants, economic assumptions).

The tables are read once into a frozen ReferenceData value which callers
pass explicitly into the rate functions and the projection driver.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from cohort_model.config.loaders import load_economic_assumptions, load_yaml_config
from cohort_model.config.models import EconomicAssumptions
from cohort_model.exceptions import ConfigLoadError, DataReadError
from cohort_model.state.schema import (
    AGE,
    FEMALE,
    FERTILE_MAX_AGE,
    FERTILE_MIN_AGE,
    MALE,
    MAX_AGE,
    WORKING_MIN_AGE,
    Sex,
)
from cohort_model.state.snapshot import N_AGES, PopulationSnapshot

logger = logging.getLogger(__name__)

REFERENCE_DIR = Path(__file__).parent / "reference"

POPULATION_FILE = "population_2024.csv"
LIFE_TABLE_FILE = "life_table.csv"
FERTILITY_FILE = "fertility_rates.csv"
MIGRATION_FILE = "migration_profile.csv"
EMPLOYMENT_FILE = "employment_rates.csv"
HEALTHCARE_FILE = "healthcare_multipliers.csv"
DEMOGRAPHY_FILE = "demography.yaml"
ECONOMICS_FILE = "economics.yaml"


@dataclass(frozen=True)
class AgeBandValue:
    """A value attached to an inclusive age band such as "20-24" or "80+"."""

    label: str
    min_age: int
    max_age: int
    value: float
    name: Optional[str] = None

    @property
    def span(self) -> int:
        return self.max_age - self.min_age + 1

    def contains(self, age: int) -> bool:
        return self.min_age <= age <= self.max_age


@dataclass(frozen=True)
class DemographicConstants:
    base_year: int
    baseline_total_fertility_rate: float
    sex_ratio_at_birth: float
    migration_male_share: float
    child_age_limit: int = WORKING_MIN_AGE


@dataclass(frozen=True, eq=False)
class ReferenceData:
    """Read-only lookup tables shared by every projection run."""

    base_population: PopulationSnapshot
    qx_male: np.ndarray
    qx_female: np.ndarray
    asfr: np.ndarray
    migration_profile: Dict[Sex, Tuple[AgeBandValue, ...]]
    employment_rates: Tuple[AgeBandValue, ...]
    healthcare_multipliers: Tuple[AgeBandValue, ...]
    constants: DemographicConstants
    economics: EconomicAssumptions

    def __post_init__(self) -> None:
        for name in ("qx_male", "qx_female", "asfr"):
            arr = np.array(getattr(self, name), dtype=float)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    def qx(self, sex: Sex) -> np.ndarray:
        return self.qx_male if Sex(sex) is Sex.MALE else self.qx_female


def parse_age_group(age_group: str, open_max_age: int = MAX_AGE) -> Tuple[int, int]:
    """
    Parse an age group label like "20-24" or "80+" into an inclusive (min, max).

    Open-ended groups run to ``open_max_age``.
    """
    label = str(age_group).strip()
    try:
        if label.endswith("+"):
            return int(label[:-1]), open_max_age
        lo, hi = label.split("-")
        lo_i, hi_i = int(lo), int(hi)
    except ValueError as e:
        raise ValueError(f"Unparseable age group '{age_group}'") from e
    if lo_i > hi_i:
        raise ValueError(f"Age group '{age_group}' has min above max")
    return lo_i, hi_i


def _read_table(path: Path, required_columns: Sequence[str]) -> pd.DataFrame:
    if not path.exists():
        logger.error(f"Reference table not found: {path}")
        raise DataReadError(f"Reference table not found: {path}")
    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as e:
        logger.error(f"Error reading reference table {path}: {e}")
        raise DataReadError(f"Error reading reference table {path}") from e

    missing = set(required_columns) - set(df.columns)
    if missing:
        raise DataReadError(f"{path.name} is missing columns: {sorted(missing)}")
    if df[list(required_columns)].isnull().any().any():
        raise DataReadError(f"{path.name} contains empty values")
    logger.debug(f"Loaded {len(df)} rows from {path.name}")
    return df


def _check_full_age_coverage(df: pd.DataFrame, path: Path) -> pd.DataFrame:
    ages = df[AGE].astype(int)
    if ages.duplicated().any():
        dupes = sorted(ages[ages.duplicated()].unique().tolist())
        raise DataReadError(f"{path.name} has duplicate ages: {dupes}")
    missing = sorted(set(range(N_AGES)) - set(ages))
    extra = sorted(set(ages) - set(range(N_AGES)))
    if missing or extra:
        raise DataReadError(f"{path.name} must cover ages 0..{MAX_AGE} exactly (missing={missing}, extra={extra})")
    return df.assign(**{AGE: ages}).sort_values(AGE).reset_index(drop=True)


def read_base_population(path: Path) -> PopulationSnapshot:
    df = _check_full_age_coverage(_read_table(path, [AGE, MALE, FEMALE]), path)
    if (df[[MALE, FEMALE]] < 0).any().any():
        raise DataReadError(f"{path.name} contains negative population counts")
    snapshot = PopulationSnapshot(male=df[MALE].to_numpy(), female=df[FEMALE].to_numpy())
    logger.info(f"Baseline population loaded: {snapshot.total_population:,} persons")
    return snapshot


def read_life_table(path: Path) -> Tuple[np.ndarray, np.ndarray]:
    df = _check_full_age_coverage(_read_table(path, [AGE, "qx_male", "qx_female"]), path)
    qx = df[["qx_male", "qx_female"]]
    if ((qx < 0) | (qx > 1)).any().any():
        raise DataReadError(f"{path.name} has mortality probabilities outside [0, 1]")
    return df["qx_male"].to_numpy(dtype=float), df["qx_female"].to_numpy(dtype=float)


def read_fertility_rates(path: Path) -> np.ndarray:
    """ASFR per woman, indexed by age 0..MAX_AGE (zero outside the fertile window)."""
    df = _read_table(path, [AGE, "rate_per_1000"])
    ages = df[AGE].astype(int)
    outside = ages[(ages < FERTILE_MIN_AGE) | (ages > FERTILE_MAX_AGE)]
    if not outside.empty:
        raise DataReadError(
            f"{path.name} has rates outside ages {FERTILE_MIN_AGE}-{FERTILE_MAX_AGE}: {outside.tolist()}"
        )
    if ages.duplicated().any():
        raise DataReadError(f"{path.name} has duplicate ages")
    asfr = np.zeros(N_AGES, dtype=float)
    # per-1000 to per-woman
    asfr[ages.to_numpy()] = df["rate_per_1000"].to_numpy(dtype=float) / 1000.0
    return asfr


def _read_bands(
    path: Path, value_column: str, open_max_age: int, name_column: Optional[str] = None
) -> Tuple[AgeBandValue, ...]:
    required = ["age_group", value_column] + ([name_column] if name_column else [])
    df = _read_table(path, required)
    bands: List[AgeBandValue] = []
    for _, row in df.iterrows():
        try:
            lo, hi = parse_age_group(row["age_group"], open_max_age)
        except ValueError as e:
            raise DataReadError(f"{path.name}: {e}") from e
        value = float(row[value_column])
        if value < 0:
            raise DataReadError(f"{path.name}: negative value for band {row['age_group']}")
        bands.append(
            AgeBandValue(
                label=str(row["age_group"]),
                min_age=lo,
                max_age=hi,
                value=value,
                name=str(row[name_column]) if name_column else None,
            )
        )
    return tuple(bands)


def read_migration_profile(path: Path) -> Dict[Sex, Tuple[AgeBandValue, ...]]:
    # the terminal bucket never receives migrants, so open bands stop one short
    return {
        Sex.MALE: _read_bands(path, "male_weight", open_max_age=MAX_AGE - 1),
        Sex.FEMALE: _read_bands(path, "female_weight", open_max_age=MAX_AGE - 1),
    }


def read_demographic_constants(path: Path) -> DemographicConstants:
    try:
        raw = load_yaml_config(path)
    except ConfigLoadError as e:
        raise DataReadError(f"Could not load demographic constants from {path}") from e
    try:
        constants = DemographicConstants(
            base_year=int(raw["base_year"]),
            baseline_total_fertility_rate=float(raw["baseline_total_fertility_rate"]),
            sex_ratio_at_birth=float(raw["sex_ratio_at_birth"]),
            migration_male_share=float(raw["migration_male_share"]),
            child_age_limit=int(raw.get("child_age_limit", WORKING_MIN_AGE)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DataReadError(f"{path.name} is missing or has invalid constants: {e}") from e
    if int(raw.get("max_age", MAX_AGE)) != MAX_AGE:
        raise DataReadError(f"{path.name}: max_age must be {MAX_AGE}")
    if constants.baseline_total_fertility_rate <= 0:
        raise DataReadError(f"{path.name}: baseline_total_fertility_rate must be positive")
    if not 0.0 <= constants.migration_male_share <= 1.0:
        raise DataReadError(f"{path.name}: migration_male_share must be within [0, 1]")
    return constants


def load_reference_data(directory: Optional[Path] = None) -> ReferenceData:
    """
    Load every reference table from ``directory`` (default: bundled data).

    Raises:
        DataReadError: If any table is missing or malformed.
    """
    directory = Path(directory) if directory is not None else REFERENCE_DIR
    logger.info(f"Loading reference data from: {directory}")

    qx_male, qx_female = read_life_table(directory / LIFE_TABLE_FILE)
    try:
        economics = load_economic_assumptions(directory / ECONOMICS_FILE)
    except ConfigLoadError as e:
        raise DataReadError(f"Could not load economic assumptions from {directory / ECONOMICS_FILE}") from e

    reference = ReferenceData(
        base_population=read_base_population(directory / POPULATION_FILE),
        qx_male=qx_male,
        qx_female=qx_female,
        asfr=read_fertility_rates(directory / FERTILITY_FILE),
        migration_profile=read_migration_profile(directory / MIGRATION_FILE),
        employment_rates=_read_bands(directory / EMPLOYMENT_FILE, "employment_rate", open_max_age=MAX_AGE),
        healthcare_multipliers=_read_bands(
            directory / HEALTHCARE_FILE, "multiplier", open_max_age=MAX_AGE, name_column="band"
        ),
        constants=read_demographic_constants(directory / DEMOGRAPHY_FILE),
        economics=economics,
    )
    logger.info(
        f"Reference data ready: base year {reference.constants.base_year}, "
        f"{len(reference.employment_rates)} employment bands, "
        f"{len(reference.healthcare_multipliers)} healthcare bands"
    )
    return reference
