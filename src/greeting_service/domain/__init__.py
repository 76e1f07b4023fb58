"""Domain layer: value objects, resolution rules and the error taxonomy (no I/O)."""
