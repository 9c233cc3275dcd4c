"""Utility functions for the flow graph editor."""

from flowgraph.utils.identifiers import (
    generate_event_id,
    generate_session_id,
    utc_timestamp,
)

__all__ = [
    "generate_event_id",
    "generate_session_id",
    "utc_timestamp",
]
