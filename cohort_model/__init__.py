"""Cohort-component population projection and economic metrics for Portugal."""

__version__ = "0.1.0"
