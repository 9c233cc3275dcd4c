"""Remote store adapters for loading and saving flow graphs.

The editor only knows the RemoteStore protocol below. fetch() returns None
when a task has no graph yet; transport and format problems raise
StoreError.
"""

from __future__ import annotations

import logging
import os
from urllib.parse import quote
from typing import Protocol

import httpx
from pydantic import ValidationError

from flowgraph.models.graph_document import GraphDocument

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("FLOW_API_URL", "http://localhost:3001")
DEFAULT_TIMEOUT = float(os.getenv("FLOW_HTTP_TIMEOUT", "10.0"))


def encode_task_id(task_id: str) -> str:
    """Percent-encode a task id for use as one URL path segment."""
    return quote(task_id, safe="")


class StoreError(Exception):
    """Exception raised when the store cannot be reached or returns bad data."""
    pass


class RemoteStore(Protocol):
    """Protocol for loading and persisting graph documents."""

    async def fetch(self, task_id: str) -> GraphDocument | None:
        """Load the graph for a task, or None when there is none."""
        ...

    async def put(self, document: GraphDocument) -> None:
        """Persist a graph keyed by its id."""
        ...


class InMemoryStore:
    """Keeps serialized documents in a dict.

    Documents are stored and returned as copies, so nothing the editor holds
    is shared with the store.
    """

    def __init__(self, documents: dict[str, dict] | None = None) -> None:
        self.documents: dict[str, dict] = dict(documents or {})
        self.put_count = 0

    async def fetch(self, task_id: str) -> GraphDocument | None:
        data = self.documents.get(task_id)
        if data is None:
            return None
        try:
            return GraphDocument.from_payload(data)
        except ValidationError as e:
            raise StoreError(f"Stored graph for {task_id} is malformed: {e}") from e

    async def put(self, document: GraphDocument) -> None:
        self.documents[document.id] = document.to_payload()
        self.put_count += 1


class HttpRemoteStore:
    """Talks to the flow store service over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the flow store service
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used to run against an in-process app)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def fetch(self, task_id: str) -> GraphDocument | None:
        url = f"{self.base_url}/api/tasks/{encode_task_id(task_id)}"

        try:
            async with self._client() as client:
                response = await client.get(url)

                if response.status_code == 404:
                    return None

                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"Store returned {e.response.status_code} for task {task_id}"
            ) from e
        except httpx.RequestError as e:
            raise StoreError(
                f"Failed to connect to store at {self.base_url}: {e}"
            ) from e
        except ValueError as e:
            raise StoreError(f"Store returned invalid JSON for task {task_id}") from e

        graph = data.get("graph") if isinstance(data, dict) else None
        if not graph:
            logger.debug("No graph stored for task %s", task_id)
            return None

        try:
            return GraphDocument.from_payload(graph)
        except ValidationError as e:
            raise StoreError(f"Stored graph for {task_id} is malformed: {e}") from e

    async def put(self, document: GraphDocument) -> None:
        url = f"{self.base_url}/api/tasks/{encode_task_id(document.id)}/graph"

        try:
            async with self._client() as client:
                response = await client.put(url, json=document.to_payload())
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"Store rejected graph for {document.id}: {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise StoreError(
                f"Failed to connect to store at {self.base_url}: {e}"
            ) from e
