"""Visualizer contract and a JSON preview consumer."""

import json
from typing import Protocol

from flowgraph.models.graph_document import GraphDocument


class Visualizer(Protocol):
    """Renders a read-only graph snapshot. Must tolerate dangling targets."""

    def render(self, document: GraphDocument) -> None:
        ...


class JsonPreview:
    """Keeps the pretty-printed wire form of the latest snapshot."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent
        self.text = ""
        self.render_count = 0

    def render(self, document: GraphDocument) -> None:
        self.text = json.dumps(document.to_payload(), indent=self.indent)
        self.render_count += 1
