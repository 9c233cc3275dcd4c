"""Core data models for the flow graph editor."""

from flowgraph.models.graph_document import (
    DEFAULT_INITIAL,
    FINAL_TYPE,
    TERMINAL,
    GraphDocument,
    StateDef,
    default_document,
)
from flowgraph.models.edit_error import (
    EditError,
    ErrorKind,
)
from flowgraph.models.editor_event import (
    EditorEvent,
    EditorEventType,
)

__all__ = [
    # Graph document
    "DEFAULT_INITIAL",
    "FINAL_TYPE",
    "TERMINAL",
    "GraphDocument",
    "StateDef",
    "default_document",
    # Results
    "EditError",
    "ErrorKind",
    # Activity events
    "EditorEvent",
    "EditorEventType",
]
