"""Validation rules for state names and graph integrity."""

from flowgraph.validation.validators import (
    STATE_NAME_PATTERN,
    is_resolvable,
    validate_graph_integrity,
    validate_state_name,
)

__all__ = [
    "STATE_NAME_PATTERN",
    "is_resolvable",
    "validate_graph_integrity",
    "validate_state_name",
]
