"""Event sinks for the editor's activity log."""

import logging
import queue
import threading
from pathlib import Path
from typing import Protocol

import httpx

from flowgraph.adapters.remote_store import DEFAULT_API_URL, DEFAULT_TIMEOUT, encode_task_id
from flowgraph.models.editor_event import EditorEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Protocol for receiving editor events."""

    def append(self, event: EditorEvent) -> None:
        """Append an event to the sink."""
        ...


class ListSink:
    """Stores events in a list."""

    def __init__(self) -> None:
        self.events: list[EditorEvent] = []

    def append(self, event: EditorEvent) -> None:
        """Append an event to the list."""
        self.events.append(event)

    def messages(self) -> list[str]:
        return [event.message for event in self.events]

    def clear(self) -> None:
        """Clear all events."""
        self.events.clear()


class FileSink:
    """Writes events to a JSONL file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, event: EditorEvent) -> None:
        """Append an event to the file."""
        with open(self.path, "a") as f:
            f.write(event.model_dump_json() + "\n")


class HttpSink:
    """Posts events to the store's activity log for the event's task.

    append() only enqueues; a background thread does the posting, so the
    editor's event loop never waits on the network.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._queue: queue.Queue[EditorEvent | None] = queue.Queue()
        self._worker = threading.Thread(
            target=self._drain, name="flowgraph-http-sink", daemon=True
        )
        self._worker.start()

    def append(self, event: EditorEvent) -> None:
        """Queue an event for posting."""
        self._queue.put(event)

    def flush(self) -> None:
        """Block until every queued event has been posted (or dropped)."""
        self._queue.join()

    def close(self, timeout: float | None = None) -> None:
        """Post what is queued, then stop the worker."""
        self._queue.put(None)
        self._worker.join(timeout)

    def _drain(self) -> None:
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            while True:
                event = self._queue.get()
                try:
                    if event is None:
                        return
                    self._post(client, event)
                finally:
                    self._queue.task_done()

    def _post(self, client: httpx.Client, event: EditorEvent) -> None:
        url = f"{self.base_url}/api/tasks/{encode_task_id(event.task_id)}/logs"
        payload = {"events": [event.model_dump(mode="json")]}
        try:
            response = client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            # the activity log must never break an edit
            logger.warning("Failed to post editor event %s: %s", event.event_id, e)


class FanoutSink:
    """Forwards every event to several sinks in order."""

    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def append(self, event: EditorEvent) -> None:
        for sink in self.sinks:
            sink.append(event)
