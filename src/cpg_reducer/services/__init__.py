"""Service layer — the reduce, merge and emit stages of the pipeline."""
