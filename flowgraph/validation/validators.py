"""Pure checks for state names and whole graphs.

No side effects, no I/O. The editor calls validate_state_name before every
add and validate_graph_integrity after every delete.
"""

import re
from collections.abc import Collection

from flowgraph.models.edit_error import EditError, ErrorKind
from flowgraph.models.graph_document import TERMINAL, GraphDocument

STATE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# python attribute -> wire name, in the order they are reported
_TRANSITIONS = (("on_done", "onDone"), ("on_error", "onError"))


def validate_state_name(candidate: str, existing_ids: Collection[str]) -> EditError | None:
    """Check a proposed state name.

    Args:
        candidate: The name typed by the user
        existing_ids: Ids already present in the graph

    Returns:
        The first failing rule as an EditError, or None when the name is usable
    """
    if not candidate.strip():
        return EditError(kind=ErrorKind.empty_name, message="State name is required")
    if candidate in existing_ids:
        return EditError(
            kind=ErrorKind.duplicate_name,
            message="State already exists",
            state_id=candidate,
        )
    if not STATE_NAME_PATTERN.match(candidate):
        return EditError(
            kind=ErrorKind.invalid_format,
            message="Invalid name (letters, numbers, underscore only)",
            state_id=candidate,
        )
    return None


def is_resolvable(target: str, doc: GraphDocument) -> bool:
    """True when a transition target is unset, terminal, or an existing state."""
    return not target or target == TERMINAL or target in doc.states


def validate_graph_integrity(doc: GraphDocument) -> list[EditError]:
    """List every reference in the graph that does not resolve.

    Integrity problems are advisory: a graph with dangling transitions is
    still a valid save target while the author is mid-edit.
    """
    errors: list[EditError] = []

    if doc.initial not in doc.states:
        errors.append(
            EditError(
                kind=ErrorKind.missing_initial,
                message=f"Initial state does not exist: {doc.initial}",
                state_id=doc.initial,
                field="initial",
            )
        )

    for state_id, state in doc.states.items():
        for attr, wire_name in _TRANSITIONS:
            target = getattr(state, attr)
            if is_resolvable(target, doc):
                continue
            errors.append(
                EditError(
                    kind=ErrorKind.dangling_transition,
                    message=f"{state_id}.{wire_name} points to missing state: {target}",
                    state_id=state_id,
                    field=wire_name,
                )
            )

    return errors
