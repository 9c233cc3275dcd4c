"""Activity events emitted by the graph editor.

Every committed change, load and save produces one event. Sinks decide
where they end up (memory, a JSONL file, the store's activity log).
"""

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, model_validator


class EditorEventType(str, Enum):
    """Types of editor events."""

    graph_loaded = "graph_loaded"
    load_failed = "load_failed"
    state_added = "state_added"
    state_deleted = "state_deleted"
    field_changed = "field_changed"
    state_reordered = "state_reordered"
    dangling_transitions = "dangling_transitions"  # advisory, after a delete
    integrity_issues = "integrity_issues"  # advisory, after a load
    graph_saved = "graph_saved"
    save_failed = "save_failed"


# events that describe a single state must name it
_STATE_EVENTS = {
    EditorEventType.state_added,
    EditorEventType.state_deleted,
    EditorEventType.field_changed,
    EditorEventType.state_reordered,
}


class EditorEvent(BaseModel):
    """A structured record of something the editor did."""

    model_config = {"extra": "forbid"}

    event_id: str  # UUID for deduping
    task_id: str
    session_id: str
    timestamp: str
    sequence: int | None = None  # monotonic within a session

    event_type: EditorEventType
    message: str  # human readable line for the activity log
    payload: dict[str, Any]

    @model_validator(mode="after")
    def validate_payload_invariants(self) -> Self:
        """Validate payload structure based on event_type."""
        payload = self.payload
        event_type = self.event_type

        if event_type in _STATE_EVENTS and "state_id" not in payload:
            raise ValueError(f"{event_type.value} payload must contain 'state_id'")
        if event_type == EditorEventType.field_changed:
            self._validate_field_changed(payload)
        elif event_type == EditorEventType.state_reordered:
            self._validate_state_reordered(payload)
        elif event_type in (
            EditorEventType.dangling_transitions,
            EditorEventType.integrity_issues,
        ):
            self._validate_issues(payload)
        elif event_type in (EditorEventType.load_failed, EditorEventType.save_failed):
            if "error" not in payload:
                raise ValueError(f"{event_type.value} payload must contain 'error'")

        return self

    def _validate_field_changed(self, payload: dict) -> None:
        """field_changed requires field and value."""
        if "field" not in payload:
            raise ValueError("field_changed payload must contain 'field'")
        if "value" not in payload:
            raise ValueError("field_changed payload must contain 'value'")

    def _validate_state_reordered(self, payload: dict) -> None:
        """state_reordered requires target_id and the resulting order."""
        if "target_id" not in payload:
            raise ValueError("state_reordered payload must contain 'target_id'")
        if not isinstance(payload.get("ordered_ids"), list):
            raise ValueError("state_reordered payload must contain 'ordered_ids' list")

    def _validate_issues(self, payload: dict) -> None:
        """integrity events require a list of issues naming state and field."""
        issues = payload.get("issues")
        if not isinstance(issues, list):
            raise ValueError(f"{self.event_type.value} payload must contain 'issues' list")
        for issue in issues:
            if "state_id" not in issue or "field" not in issue:
                raise ValueError("each integrity issue must contain 'state_id' and 'field'")
