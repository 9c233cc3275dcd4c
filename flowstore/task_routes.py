"""API routes for task flow graphs and their activity logs."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ValidationError

from flowgraph.models.editor_event import EditorEvent
from flowgraph.models.graph_document import GraphDocument
from flowgraph.validation.validators import validate_graph_integrity
from flowstore.graph_db import (
    delete_graph as db_delete_graph,
    get_graph as db_get_graph,
    list_graphs as db_list_graphs,
    upsert_graph as db_upsert_graph,
)
from flowstore.log_db import (
    delete_events as db_delete_events,
    insert_events as db_insert_events,
    load_events as db_load_events,
)

router = APIRouter()


class TaskGraphSummary(BaseModel):
    """Summary item for listing stored graphs."""

    task_id: str
    initial: str
    state_count: int
    created_at: str
    updated_at: str


class TaskResponse(BaseModel):
    """A task and its graph; graph is null until one is saved."""

    task_id: str
    graph: dict | None = None


class SaveGraphResponse(BaseModel):
    """Result of storing a graph, with advisory integrity warnings."""

    task_id: str
    state_count: int
    updated_at: str
    warnings: list[str] = []


class LogIngestRequest(BaseModel):
    """Request body for activity log ingestion."""

    events: list[dict]


@router.get("/tasks")
def list_tasks(limit: int = 100, offset: int = 0) -> list[TaskGraphSummary]:
    """list tasks that have a stored graph."""
    return [
        TaskGraphSummary(
            task_id=row.task_id,
            initial=row.initial,
            state_count=row.state_count,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
        for row in db_list_graphs(limit=limit, offset=offset)
    ]


@router.put("/tasks/{task_id:path}/graph")
def save_graph(task_id: str, payload: dict) -> SaveGraphResponse:
    """create or replace a task's graph.

    Dangling transitions do not block the save; they come back as warnings.
    """
    try:
        graph = GraphDocument.from_payload(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if graph.id != task_id:
        raise HTTPException(
            status_code=400,
            detail="id mismatch between path and graph payload",
        )

    row = db_upsert_graph(graph)
    return SaveGraphResponse(
        task_id=row.task_id,
        state_count=row.state_count,
        updated_at=row.updated_at,
        warnings=[issue.message for issue in validate_graph_integrity(graph)],
    )


@router.delete("/tasks/{task_id:path}/graph")
def delete_graph(task_id: str) -> dict:
    """delete a task's graph and its activity log."""
    if not db_get_graph(task_id):
        raise HTTPException(status_code=404, detail=f"Graph not found: {task_id}")
    db_delete_graph(task_id)
    db_delete_events(task_id)
    return {"deleted": task_id}


@router.post("/tasks/{task_id:path}/logs")
def ingest_logs(task_id: str, request: LogIngestRequest) -> dict:
    """Append editor events to a task's activity log."""
    events: list[EditorEvent] = []
    for payload in request.events:
        try:
            event = EditorEvent.model_validate(payload)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        if event.task_id != task_id:
            raise HTTPException(
                status_code=400,
                detail="task_id mismatch between path and event payload",
            )
        events.append(event)
    inserted = db_insert_events(task_id, events)
    return {"task_id": task_id, "inserted": inserted}


@router.get("/tasks/{task_id:path}/logs")
def get_logs(task_id: str, limit: int | None = None, offset: int = 0) -> list[dict]:
    """Get a task's activity log, oldest first."""
    events = db_load_events(task_id, limit=limit, offset=offset)
    return [event.model_dump(mode="json") for event in events]


# must stay after the /graph and /logs routes
@router.get("/tasks/{task_id:path}")
def get_task(task_id: str) -> TaskResponse:
    """get a task's graph (null when nothing has been saved yet)."""
    graph = db_get_graph(task_id)
    return TaskResponse(
        task_id=task_id,
        graph=graph.to_payload() if graph else None,
    )

