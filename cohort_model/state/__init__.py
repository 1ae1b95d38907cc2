from cohort_model.state.snapshot import Cohort, PopulationSnapshot

__all__ = ["Cohort", "PopulationSnapshot"]
