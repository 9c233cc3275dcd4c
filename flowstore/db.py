"""database initialization helpers."""

from flowstore.graph_db import init_db as init_graph_db
from flowstore.log_db import init_db as init_log_db


def init_all() -> None:
    """initialize all sqlite tables."""
    init_graph_db()
    init_log_db()
