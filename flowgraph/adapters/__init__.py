"""Adapters for event capture, remote storage and rendering."""

from flowgraph.adapters.event_api import EventEmitter
from flowgraph.adapters.remote_store import (
    HttpRemoteStore,
    InMemoryStore,
    RemoteStore,
    StoreError,
)
from flowgraph.adapters.sinks import EventSink, FanoutSink, FileSink, HttpSink, ListSink
from flowgraph.adapters.visualizer import JsonPreview, Visualizer

__all__ = [
    "EventSink",
    "ListSink",
    "FileSink",
    "HttpSink",
    "FanoutSink",
    "EventEmitter",
    "RemoteStore",
    "InMemoryStore",
    "HttpRemoteStore",
    "StoreError",
    "Visualizer",
    "JsonPreview",
]
