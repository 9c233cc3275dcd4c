"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_event_id() -> str:
    """Generate a unique event ID (UUID4)."""
    return str(uuid.uuid4())


def generate_session_id() -> str:
    """Generate an editor session ID (16-char hex string)."""
    return uuid.uuid4().hex[:16]


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
