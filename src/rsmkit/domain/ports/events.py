"""Event sink port. Calls are fire-and-forget."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rsmkit.domain.model import ClusterObject


class EventType(StrEnum):
    NORMAL = "Normal"
    WARNING = "Warning"


@runtime_checkable
class EventRecorder(Protocol):
    def event(
        self,
        obj: ClusterObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None: ...


class NullEventRecorder:
    """Recorder that drops every event."""

    def event(
        self,
        obj: ClusterObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        del obj, event_type, reason, message
