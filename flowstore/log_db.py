"""SQLite storage for the per-task activity log."""

from flowgraph.models.editor_event import EditorEvent
from flowstore import connection


def init_db() -> None:
    with connection.connect() as conn:
        conn.execute(
            """
            create table if not exists task_logs (
                id integer primary key autoincrement,
                task_id text not null,
                event_id text not null unique,
                event_json text not null,
                event_type text,
                timestamp text
            )
            """
        )
        conn.execute(
            "create index if not exists idx_task_logs_task_id on task_logs(task_id)"
        )
        conn.commit()


def insert_events(task_id: str, events: list[EditorEvent]) -> int:
    """append events, skipping ids that were already stored."""
    if not events:
        return 0
    rows = [
        (
            task_id,
            event.event_id,
            event.model_dump_json(),
            event.event_type.value,
            event.timestamp,
        )
        for event in events
    ]
    with connection.connect() as conn:
        before = conn.total_changes
        conn.executemany(
            """
            insert or ignore into task_logs (task_id, event_id, event_json, event_type, timestamp)
            values (?, ?, ?, ?, ?)
            """,
            rows,
        )
        inserted = conn.total_changes - before
        conn.commit()
    return inserted


def load_events(task_id: str, limit: int | None = None, offset: int = 0) -> list[EditorEvent]:
    with connection.connect() as conn:
        if limit is None:
            rows = conn.execute(
                """
                select event_json
                from task_logs
                where task_id = ?
                order by id asc
                """,
                (task_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                """
                select event_json
                from task_logs
                where task_id = ?
                order by id asc
                limit ? offset ?
                """,
                (task_id, limit, offset),
            ).fetchall()
    return [EditorEvent.model_validate_json(row["event_json"]) for row in rows]


def delete_events(task_id: str) -> None:
    with connection.connect() as conn:
        conn.execute("delete from task_logs where task_id = ?", (task_id,))
        conn.commit()
