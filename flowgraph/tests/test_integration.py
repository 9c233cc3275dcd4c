"""Integration tests: editor, HTTP store adapter, store service and sinks."""

import asyncio
import json
import time

import httpx
import pytest

from flowgraph.adapters.event_api import EventEmitter
from flowgraph.adapters.remote_store import HttpRemoteStore, StoreError
from flowgraph.adapters.sinks import FanoutSink, FileSink, HttpSink, ListSink
from flowgraph.editor.graph_editor import EditorStatus, GraphEditor
from flowgraph.models.edit_error import ErrorKind
from flowgraph.models.editor_event import EditorEvent, EditorEventType
from flowgraph.models.graph_document import TERMINAL, GraphDocument
from flowstore import connection
from flowstore.app import app
from flowstore.db import init_all

BASE_URL = "http://flowstore.test"


@pytest.fixture
def store(tmp_path, monkeypatch):
    """HttpRemoteStore wired to the in-process store service."""
    monkeypatch.setattr(connection, "FLOW_DB_PATH", tmp_path / "flows.db")
    init_all()
    return HttpRemoteStore(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))


class TestHttpRemoteStore:
    """Test the HTTP adapter against the real service."""

    def test_unknown_task_is_not_found(self, store):
        assert asyncio.run(store.fetch("t1")) is None

    def test_put_then_fetch(self, store):
        doc = GraphDocument.from_payload({
            "id": "t1",
            "initial": "start",
            "states": {
                "start": {"description": "", "onDone": "review", "onError": ""},
                "review": {"description": "", "onDone": TERMINAL, "onError": "", "type": "final"},
            },
        })

        asyncio.run(store.put(doc))
        loaded = asyncio.run(store.fetch("t1"))

        assert loaded == doc
        assert loaded.state_ids() == ["start", "review"]

    def test_unreachable_store_raises(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        store = HttpRemoteStore(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(StoreError) as exc_info:
            asyncio.run(store.fetch("t1"))
        assert "Failed to connect" in str(exc_info.value)

    def test_server_error_raises(self):
        store = HttpRemoteStore(
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )
        with pytest.raises(StoreError):
            asyncio.run(store.fetch("t1"))

    def test_malformed_graph_raises(self):
        body = {"task_id": "t1", "graph": {"initial": "start"}}
        store = HttpRemoteStore(
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
        )
        with pytest.raises(StoreError) as exc_info:
            asyncio.run(store.fetch("t1"))
        assert "malformed" in str(exc_info.value)


class TestEditorOverHttp:
    """Test the full load / edit / save cycle through the service."""

    def test_default_edit_save_reload(self, store):
        editor = GraphEditor(store)
        assert asyncio.run(editor.load("t1")) is None
        assert editor.ordered_ids == ["start"]

        editor.add_state("review")
        editor.set_field("start", "onDone", "review")
        editor.set_field("review", "onDone", TERMINAL)
        editor.reorder("review", "start")
        assert asyncio.run(editor.save()) is None

        reloaded = GraphEditor(store)
        asyncio.run(reloaded.load("t1"))

        snap = reloaded.snapshot()
        assert snap.states["start"].on_done == "review"
        assert snap.states["review"].on_done == TERMINAL
        # display order is editor-local and not persisted
        assert reloaded.ordered_ids == ["start", "review"]

    def test_task_id_with_reserved_characters(self, store):
        """Ids containing / ? # load and save under their own key."""
        task_id = "team/t1?draft#2"
        editor = GraphEditor(store)
        asyncio.run(editor.load(task_id))
        editor.add_state("review")
        assert asyncio.run(editor.save()) is None

        reloaded = GraphEditor(store)
        assert asyncio.run(reloaded.load(task_id)) is None
        assert reloaded.snapshot().id == task_id
        assert reloaded.ordered_ids == ["start", "review"]
        assert asyncio.run(store.fetch("team")) is None

    def test_task_id_is_one_path_segment(self):
        paths: list[bytes] = []

        def record(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.raw_path)
            return httpx.Response(200, json={"task_id": "team/t1", "graph": None})

        store = HttpRemoteStore(base_url=BASE_URL, transport=httpx.MockTransport(record))
        asyncio.run(store.fetch("team/t1"))
        asyncio.run(store.put(GraphDocument(id="team/t1")))

        assert paths == [b"/api/tasks/team%2Ft1", b"/api/tasks/team%2Ft1/graph"]

    def test_save_failure_is_reported(self):
        def reject(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"task_id": "t1", "graph": None})
            return httpx.Response(503)

        editor = GraphEditor(
            HttpRemoteStore(base_url=BASE_URL, transport=httpx.MockTransport(reject))
        )
        asyncio.run(editor.load("t1"))
        editor.add_state("review")

        error = asyncio.run(editor.save())

        assert error.kind == ErrorKind.save_failed
        assert editor.status == EditorStatus.loaded
        assert editor.ordered_ids == ["start", "review"]


class TestSinks:
    """Test the event sinks."""

    def _event(self, emitter: EventEmitter, task_id: str = "t1") -> EditorEvent:
        return emitter.emit(
            EditorEventType.state_added,
            task_id,
            "State added: review",
            {"state_id": "review"},
        )

    def test_emitter_sequences(self):
        sink = ListSink()
        emitter = EventEmitter(sink, session_id="s1")
        self._event(emitter)
        self._event(emitter)

        assert [event.sequence for event in sink.events] == [0, 1]
        assert all(event.session_id == "s1" for event in sink.events)
        assert len({event.event_id for event in sink.events}) == 2

    def test_file_sink_writes_jsonl(self, tmp_path):
        path = tmp_path / "logs" / "editor.jsonl"
        emitter = EventEmitter(FileSink(path))
        self._event(emitter)
        self._event(emitter)

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        restored = EditorEvent.model_validate(json.loads(lines[0]))
        assert restored.message == "State added: review"

    def test_http_sink_posts_to_task_log(self):
        requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"inserted": 1})

        sink = HttpSink(base_url=BASE_URL, transport=httpx.MockTransport(record))
        self._event(EventEmitter(sink))
        sink.flush()

        assert len(requests) == 1
        assert requests[0].url.path == "/api/tasks/t1/logs"
        body = json.loads(requests[0].content)
        assert body["events"][0]["event_type"] == "state_added"

    def test_http_sink_never_raises(self, caplog):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = HttpSink(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        self._event(EventEmitter(sink))
        sink.close()

        assert "Failed to post editor event" in caplog.text

    def test_http_sink_encodes_task_id(self):
        requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"inserted": 1})

        sink = HttpSink(base_url=BASE_URL, transport=httpx.MockTransport(record))
        self._event(EventEmitter(sink), task_id="team/t1?x#y")
        sink.close()

        assert requests[0].url.raw_path == b"/api/tasks/team%2Ft1%3Fx%23y/logs"

    def test_slow_log_posts_do_not_stall_the_editor(self):
        """Other tasks keep running while the editor emits to a slow log."""
        requests: list[httpx.Request] = []

        def slow(request: httpx.Request) -> httpx.Response:
            time.sleep(0.5)
            requests.append(request)
            return httpx.Response(200, json={"inserted": 1})

        sink = HttpSink(base_url=BASE_URL, transport=httpx.MockTransport(slow))
        editor = GraphEditor(_NullStore(), sink=sink)

        async def scenario():
            ticks: list[float] = []

            async def ticker():
                while True:
                    ticks.append(time.monotonic())
                    await asyncio.sleep(0.01)

            ticking = asyncio.create_task(ticker())
            await asyncio.sleep(0)
            started = time.monotonic()
            await editor.load("t1")
            editor.add_state("review")
            elapsed = time.monotonic() - started
            await asyncio.sleep(0.05)
            ticking.cancel()
            gaps = [later - earlier for earlier, later in zip(ticks, ticks[1:])]
            return elapsed, max(gaps)

        elapsed, longest_gap = asyncio.run(scenario())
        sink.close()

        assert elapsed < 0.2
        assert longest_gap < 0.2
        assert len(requests) == 2

    def test_fanout_sink(self):
        first, second = ListSink(), ListSink()
        editor = GraphEditor(_NullStore(), sink=FanoutSink(first, second))
        asyncio.run(editor.load("t1"))
        editor.add_state("review")

        assert first.messages() == second.messages()
        assert first.messages()[-1] == "State added: review"


class _NullStore:
    """Store with nothing in it that accepts every save."""

    async def fetch(self, task_id):
        return None

    async def put(self, document):
        return None
