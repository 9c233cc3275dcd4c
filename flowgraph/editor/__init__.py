"""Graph editor and display-order helpers."""

from flowgraph.editor.graph_editor import EditorStatus, GraphEditor
from flowgraph.editor.ordering import is_permutation, move_before

__all__ = [
    "EditorStatus",
    "GraphEditor",
    "is_permutation",
    "move_before",
]
