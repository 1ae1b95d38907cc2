from cohort_model.dynamics.cohort import CohortTransition, evolve_population

__all__ = ["CohortTransition", "evolve_population"]
