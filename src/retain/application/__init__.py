"""Application layer: scheduling strategies, due-set selection and session orchestration."""
