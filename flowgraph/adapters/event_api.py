"""Event emission API shared by the editor and its sinks."""

from flowgraph.adapters.sinks import EventSink
from flowgraph.models.editor_event import EditorEvent, EditorEventType
from flowgraph.utils.identifiers import generate_event_id, generate_session_id, utc_timestamp


class EventEmitter:
    """Stamps ids, timestamps and sequence numbers onto editor events."""

    def __init__(self, event_sink: EventSink, session_id: str | None = None) -> None:
        self.event_sink = event_sink
        self.session_id = session_id or generate_session_id()
        self._sequence = 0

    def _next_sequence(self) -> int:
        """Get the next sequence number."""
        seq = self._sequence
        self._sequence += 1
        return seq

    def emit(
        self,
        event_type: EditorEventType,
        task_id: str,
        message: str,
        payload: dict | None = None,
    ) -> EditorEvent:
        """Emit an editor event with the given parameters."""
        event = EditorEvent(
            event_id=generate_event_id(),
            task_id=task_id,
            session_id=self.session_id,
            timestamp=utc_timestamp(),
            sequence=self._next_sequence(),
            event_type=event_type,
            message=message,
            payload=payload or {},
        )
        self.event_sink.append(event)
        return event
