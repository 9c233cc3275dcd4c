"""SQLite storage for task flow graphs."""

from dataclasses import dataclass

from flowgraph.models.graph_document import GraphDocument
from flowgraph.utils.identifiers import utc_timestamp
from flowstore import connection


@dataclass
class GraphRow:
    task_id: str
    initial: str
    state_count: int
    created_at: str
    updated_at: str


def init_db() -> None:
    with connection.connect() as conn:
        conn.execute(
            """
            create table if not exists task_graphs (
                task_id text primary key,
                graph_json text not null,
                initial text not null,
                state_count integer not null default 0,
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.commit()


def upsert_graph(graph: GraphDocument) -> GraphRow:
    """insert or update the graph of a task."""
    now = utc_timestamp()
    with connection.connect() as conn:
        conn.execute(
            """
            insert into task_graphs (task_id, graph_json, initial, state_count, created_at, updated_at)
            values (?, ?, ?, ?, ?, ?)
            on conflict(task_id) do update set
                graph_json = excluded.graph_json,
                initial = excluded.initial,
                state_count = excluded.state_count,
                updated_at = excluded.updated_at
            """,
            (
                graph.id,
                graph.model_dump_json(by_alias=True, exclude_none=True),
                graph.initial,
                len(graph.states),
                now,
                now,
            ),
        )
        conn.commit()
    return get_graph_row(graph.id)


def get_graph(task_id: str) -> GraphDocument | None:
    with connection.connect() as conn:
        row = conn.execute(
            "select graph_json from task_graphs where task_id = ?",
            (task_id,),
        ).fetchone()
    if not row:
        return None
    return GraphDocument.model_validate_json(row["graph_json"])


def get_graph_row(task_id: str) -> GraphRow | None:
    with connection.connect() as conn:
        row = conn.execute(
            """
            select task_id, initial, state_count, created_at, updated_at
            from task_graphs
            where task_id = ?
            """,
            (task_id,),
        ).fetchone()
    if not row:
        return None
    return GraphRow(
        task_id=row["task_id"],
        initial=row["initial"],
        state_count=row["state_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def list_graphs(limit: int = 100, offset: int = 0) -> list[GraphRow]:
    with connection.connect() as conn:
        rows = conn.execute(
            """
            select task_id, initial, state_count, created_at, updated_at
            from task_graphs
            order by updated_at desc
            limit ? offset ?
            """,
            (limit, offset),
        ).fetchall()
    return [
        GraphRow(
            task_id=row["task_id"],
            initial=row["initial"],
            state_count=row["state_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
        for row in rows
    ]


def delete_graph(task_id: str) -> None:
    with connection.connect() as conn:
        conn.execute("delete from task_graphs where task_id = ?", (task_id,))
        conn.commit()
