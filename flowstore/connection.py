"""SQLite connection shared by the store tables."""

import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "flows.db"
FLOW_DB_PATH = Path(os.getenv("FLOW_DB_PATH", str(DEFAULT_DB_PATH)))


def connect() -> sqlite3.Connection:
    FLOW_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(FLOW_DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn
