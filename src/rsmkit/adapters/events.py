"""Event recorder that writes events to the log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rsmkit.domain.ports import EventType

if TYPE_CHECKING:
    from rsmkit.domain.model import ClusterObject


class LoggingEventRecorder:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def event(
        self,
        obj: ClusterObject,
        event_type: EventType,
        reason: str,
        message: str,
    ) -> None:
        level = logging.WARNING if event_type is EventType.WARNING else logging.INFO
        self._logger.log(level, "[%s] %s %s: %s", event_type, obj.key, reason, message)
