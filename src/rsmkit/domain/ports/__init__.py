"""Domain port definitions for adapters."""

from __future__ import annotations

from .cluster import ClientOptions, ClusterClient, ClusterReader
from .events import EventRecorder, EventType, NullEventRecorder

__all__ = [
    "ClientOptions",
    "ClusterClient",
    "ClusterReader",
    "EventRecorder",
    "EventType",
    "NullEventRecorder",
]
