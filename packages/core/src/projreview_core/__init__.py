"""Review workflow: scoring, record accessors, lifecycle and analysis backends."""
