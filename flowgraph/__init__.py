"""Flow graph authoring core - edit, validate and sync task state machines."""

from flowgraph.models.graph_document import (
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
from flowgraph.validation.validators import (
    validate_graph_integrity,
    validate_state_name,
)
from flowgraph.editor.graph_editor import EditorStatus, GraphEditor
from flowgraph.adapters.remote_store import HttpRemoteStore, InMemoryStore, StoreError

__all__ = [
    # Graph document
    "TERMINAL",
    "GraphDocument",
    "StateDef",
    "default_document",
    # Results and events
    "EditError",
    "ErrorKind",
    "EditorEvent",
    "EditorEventType",
    # Validation
    "validate_graph_integrity",
    "validate_state_name",
    # High-level APIs
    "EditorStatus",
    "GraphEditor",
    "HttpRemoteStore",
    "InMemoryStore",
    "StoreError",
]
