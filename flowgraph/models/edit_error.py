"""Typed results for editor operations.

Nothing in the editing core raises for a user mistake. Every rejected
operation hands back an EditError so the caller decides how to present it.
"""

from enum import Enum

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Kinds of editor errors."""

    # name validation
    empty_name = "empty_name"
    duplicate_name = "duplicate_name"
    invalid_format = "invalid_format"

    # mutation guards
    cannot_delete_initial = "cannot_delete_initial"
    unknown_state = "unknown_state"
    unknown_field = "unknown_field"
    not_loaded = "not_loaded"

    # remote store
    load_failed = "load_failed"
    load_superseded = "load_superseded"
    save_failed = "save_failed"
    save_in_progress = "save_in_progress"

    # graph integrity (advisory, never blocks a save)
    dangling_transition = "dangling_transition"
    missing_initial = "missing_initial"


# kinds reported by validate_graph_integrity
INTEGRITY_KINDS = {ErrorKind.dangling_transition, ErrorKind.missing_initial}


class EditError(BaseModel):
    """A recoverable error returned by the validator or the editor."""

    model_config = {"frozen": True}

    kind: ErrorKind
    message: str
    state_id: str | None = None
    field: str | None = None  # wire name, e.g. "onDone"

    @property
    def is_advisory(self) -> bool:
        return self.kind in INTEGRITY_KINDS
