"""
Exception classes for the cohort projection engine.

Invalid parameters are fatal and raised before a run starts. Balance
discrepancies are not exceptions; see cohort_model.projections.validation.
"""


class CohortModelError(Exception):
    """Base exception for all cohort-model errors."""

    pass


class InvalidParameterError(CohortModelError):
    """Raised when a simulation parameter is outside its valid domain."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])


class DataReadError(CohortModelError):
    """Raised when a reference table cannot be found, read, or validated."""

    pass


class ConfigLoadError(CohortModelError):
    """Raised for errors during YAML configuration or scenario loading."""

    pass
