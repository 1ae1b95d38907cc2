from cohort_model.data.readers import ReferenceData, load_reference_data

__all__ = ["ReferenceData", "load_reference_data"]
