"""Graph editor: the only owner of a live flow graph.

The editor holds the current GraphDocument together with the state that only
matters while authoring (display order, selection, drag cursor). Every
mutation goes through here, is checked by the validators first, and commits a
brand new document so snapshots handed out earlier never change.

Example:
    editor = GraphEditor(HttpRemoteStore())
    await editor.load("t1")
    editor.add_state("review")
    editor.set_field("start", "onDone", "review")
    await editor.save()
"""

from __future__ import annotations

import logging
from enum import Enum

from flowgraph.adapters.event_api import EventEmitter
from flowgraph.adapters.remote_store import RemoteStore, StoreError
from flowgraph.adapters.sinks import EventSink, ListSink
from flowgraph.adapters.visualizer import Visualizer
from flowgraph.editor.ordering import move_before
from flowgraph.models.edit_error import EditError, ErrorKind
from flowgraph.models.editor_event import EditorEventType
from flowgraph.models.graph_document import TERMINAL, GraphDocument, StateDef, default_document
from flowgraph.validation.validators import validate_graph_integrity, validate_state_name

logger = logging.getLogger(__name__)


class EditorStatus(str, Enum):
    """Editor lifecycle."""

    unloaded = "unloaded"
    loading = "loading"
    loaded = "loaded"
    load_failed = "load_failed"  # terminal until the next load()
    saving = "saving"  # behaves like loaded for mutations


# accepted field names -> StateDef attribute
_FIELD_ATTRS = {
    "description": "description",
    "onDone": "on_done",
    "onError": "on_error",
    "type": "type",
    "on_done": "on_done",
    "on_error": "on_error",
}

# StateDef attribute -> wire name
_WIRE_NAMES = {
    "description": "description",
    "on_done": "onDone",
    "on_error": "onError",
    "type": "type",
}


def _issue_payload(issues: list[EditError]) -> list[dict]:
    return [
        {"kind": i.kind.value, "state_id": i.state_id, "field": i.field, "message": i.message}
        for i in issues
    ]


class GraphEditor:
    """Mutation API over one task's flow graph."""

    def __init__(
        self,
        store: RemoteStore,
        sink: EventSink | None = None,
        visualizers: list[Visualizer] | None = None,
        session_id: str | None = None,
    ) -> None:
        """
        Args:
            store: Where graphs are loaded from and saved to
            sink: Receives activity events (kept in memory if not provided)
            visualizers: Consumers re-rendered with a snapshot after each commit
            session_id: Optional id stamped on every emitted event
        """
        self.store = store
        self.sink = sink if sink is not None else ListSink()
        self.visualizers: list[Visualizer] = list(visualizers or [])
        self._emitter = EventEmitter(self.sink, session_id=session_id)

        self.status = EditorStatus.unloaded
        self.task_id: str | None = None
        self.selected: str | None = None
        self.drag_source: str | None = None

        self._document: GraphDocument | None = None
        self._ordered_ids: list[str] = []
        self._load_generation = 0
        self._saving = False

    # --- Read access ---

    @property
    def ordered_ids(self) -> list[str]:
        """Display order of the states (a copy)."""
        return list(self._ordered_ids)

    @property
    def is_editable(self) -> bool:
        return self._document is not None and self.status in (
            EditorStatus.loaded,
            EditorStatus.saving,
        )

    @property
    def is_saving(self) -> bool:
        return self._saving

    def snapshot(self) -> GraphDocument | None:
        """Independent copy of the current document, or None when unloaded."""
        if self._document is None:
            return None
        return self._document.model_copy(deep=True)

    def is_initial(self, state_id: str) -> bool:
        return self._document is not None and self._document.initial == state_id

    def selected_state(self) -> StateDef | None:
        """The StateDef under the selection, or None if nothing valid is selected."""
        if self._document is None or self.selected is None:
            return None
        return self._document.get_state(self.selected)

    def transition_targets(self, state_id: str) -> list[str]:
        """Choices for a transition picker: every other state, then the terminal marker."""
        return [s for s in self._ordered_ids if s != state_id] + [TERMINAL]

    def check_integrity(self) -> list[EditError]:
        if self._document is None:
            return []
        return validate_graph_integrity(self._document)

    # --- Remote sync ---

    async def load(self, task_id: str) -> EditError | None:
        """Load the graph for a task, or start a default one if none is stored.

        A load that is overtaken by a newer load discards its result and
        returns a load_superseded error.
        """
        self._load_generation += 1
        generation = self._load_generation

        self.status = EditorStatus.loading
        self.task_id = task_id
        self._document = None
        self._ordered_ids = []
        self.selected = None
        self.drag_source = None

        try:
            document = await self.store.fetch(task_id)
            if document is not None and document.id != task_id:
                raise StoreError(
                    f"Store returned graph {document.id} for task {task_id}"
                )
        except StoreError as e:
            if generation != self._load_generation:
                return self._superseded(task_id)
            self.status = EditorStatus.load_failed
            message = f"Failed to load task: {e}"
            self._emit(EditorEventType.load_failed, message, {"error": str(e)}, task_id=task_id)
            return EditError(kind=ErrorKind.load_failed, message=message)

        if generation != self._load_generation:
            return self._superseded(task_id)

        source = "store"
        if document is None:
            document = default_document(task_id)
            source = "default"

        self._ordered_ids = document.state_ids()
        self.status = EditorStatus.loaded
        self._commit(document)
        self._emit(
            EditorEventType.graph_loaded,
            f"Loaded flow for {task_id}",
            {"source": source, "state_count": len(document.states)},
        )

        issues = validate_graph_integrity(document)
        if issues:
            self._emit(
                EditorEventType.integrity_issues,
                f"{len(issues)} integrity issue(s) in loaded flow {task_id}",
                {"issues": _issue_payload(issues)},
            )
        return None

    async def save(self) -> EditError | None:
        """Persist the current document. Only one save may be in flight.

        A failed save keeps the in-memory graph as it is.
        """
        if not self.is_editable:
            return self._not_loaded()
        if self._saving:
            return EditError(
                kind=ErrorKind.save_in_progress,
                message="A save is already in progress",
            )

        self._saving = True
        self.status = EditorStatus.saving
        generation = self._load_generation
        document = self.snapshot()

        try:
            await self.store.put(document)
        except StoreError as e:
            message = f"Failed to save graph: {e}"
            self._emit(
                EditorEventType.save_failed,
                f"✗ {message}",
                {"error": str(e)},
                task_id=document.id,
            )
            return EditError(kind=ErrorKind.save_failed, message=message)
        else:
            self._emit(
                EditorEventType.graph_saved,
                f"✓ State graph saved for {document.id}",
                {"state_count": len(document.states)},
                task_id=document.id,
            )
            return None
        finally:
            self._saving = False
            # a load started mid-save owns the status now
            if generation == self._load_generation:
                self.status = EditorStatus.loaded

    # --- Mutations ---

    def add_state(self, name: str) -> EditError | None:
        """Append a new empty state."""
        if not self.is_editable:
            return self._not_loaded()

        error = validate_state_name(name, self._ordered_ids)
        if error:
            return error

        states = {**self._document.states, name: StateDef()}
        self._ordered_ids = [*self._ordered_ids, name]
        self._commit(self._document.model_copy(update={"states": states}))
        self._emit(EditorEventType.state_added, f"State added: {name}", {"state_id": name})
        return None

    def delete_state(self, name: str) -> EditError | None:
        """Remove a state. The initial state can never be removed.

        Transitions in other states that pointed at the removed state are
        left as they are and reported in a dangling_transitions event.
        """
        if not self.is_editable:
            return self._not_loaded()

        document = self._document
        if name == document.initial:
            return EditError(
                kind=ErrorKind.cannot_delete_initial,
                message="The initial state cannot be deleted",
                state_id=name,
            )
        if name not in document.states:
            return self._unknown_state(name)

        states = {k: v for k, v in document.states.items() if k != name}
        self._ordered_ids = [s for s in self._ordered_ids if s != name]
        if self.selected == name:
            self.selected = self._ordered_ids[0] if self._ordered_ids else None
        if self.drag_source == name:
            self.drag_source = None

        self._commit(document.model_copy(update={"states": states}))
        self._emit(EditorEventType.state_deleted, f"State deleted: {name}", {"state_id": name})

        dangling = [
            issue
            for issue in validate_graph_integrity(self._document)
            if issue.kind == ErrorKind.dangling_transition
        ]
        if dangling:
            self._emit(
                EditorEventType.dangling_transitions,
                f"{len(dangling)} dangling transition(s) after deleting {name}",
                {
                    "deleted_id": name,
                    "issues": _issue_payload(dangling),
                },
            )
        return None

    def set_field(self, state_id: str, field: str, value: str | None) -> EditError | None:
        """Replace one field of a state. Targets are not checked here."""
        if not self.is_editable:
            return self._not_loaded()

        attr = _FIELD_ATTRS.get(field)
        if attr is None:
            return EditError(
                kind=ErrorKind.unknown_field,
                message=f"Unknown state field: {field}",
                state_id=state_id,
                field=field,
            )
        state = self._document.get_state(state_id)
        if state is None:
            return self._unknown_state(state_id)

        if value is None and attr != "type":
            value = ""
        data = state.model_dump()
        data[attr] = value
        updated = StateDef.model_validate(data)

        states = {**self._document.states, state_id: updated}
        self._commit(self._document.model_copy(update={"states": states}))

        wire_name = _WIRE_NAMES[attr]
        self._emit(
            EditorEventType.field_changed,
            f"Updated {state_id}.{wire_name}",
            {"state_id": state_id, "field": wire_name, "value": getattr(updated, attr)},
        )
        return None

    def reorder(self, dragged_id: str | None, target_id: str) -> EditError | None:
        """Move dragged_id just before target_id in the display order."""
        if not dragged_id or dragged_id == target_id:
            self.drag_source = None
            return None
        if not self.is_editable:
            return self._not_loaded()

        self.drag_source = None
        for state_id in (dragged_id, target_id):
            if state_id not in self._ordered_ids:
                return self._unknown_state(state_id)

        self._ordered_ids = move_before(self._ordered_ids, dragged_id, target_id)
        self._emit(
            EditorEventType.state_reordered,
            f"Moved {dragged_id} before {target_id}",
            {
                "state_id": dragged_id,
                "target_id": target_id,
                "ordered_ids": list(self._ordered_ids),
            },
        )
        return None

    def begin_drag(self, state_id: str) -> None:
        self.drag_source = state_id

    def drop(self, target_id: str) -> EditError | None:
        """Finish a drag started with begin_drag()."""
        return self.reorder(self.drag_source, target_id)

    def select(self, state_id: str | None) -> None:
        self.selected = state_id

    # --- Internals ---

    def _commit(self, document: GraphDocument) -> None:
        self._document = document
        for visualizer in self.visualizers:
            visualizer.render(self.snapshot())

    def _emit(
        self,
        event_type: EditorEventType,
        message: str,
        payload: dict | None = None,
        task_id: str | None = None,
    ) -> None:
        if task_id is None:
            task_id = self._document.id if self._document else self.task_id or ""
        self._emitter.emit(event_type, task_id, message, payload)

    def _superseded(self, task_id: str) -> EditError:
        logger.debug("Discarding stale load result for task %s", task_id)
        return EditError(
            kind=ErrorKind.load_superseded,
            message=f"Load of {task_id} was superseded by a newer load",
        )

    def _not_loaded(self) -> EditError:
        return EditError(
            kind=ErrorKind.not_loaded,
            message=f"No graph is loaded (status: {self.status.value})",
        )

    def _unknown_state(self, state_id: str) -> EditError:
        return EditError(
            kind=ErrorKind.unknown_state,
            message=f"State not found: {state_id}",
            state_id=state_id,
        )
