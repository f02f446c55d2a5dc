"""Execution and transform contexts for one reconciliation pass."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rsmkit.domain.errors import ReconcileCancelledError

if TYPE_CHECKING:
    import logging

    from rsmkit.domain.ports import ClusterReader, EventRecorder


@dataclass(slots=True)
class ReconcileContext:
    """Cancellable execution context shared by every stage of a pass.

    The outer control loop owns it and may call ``cancel`` from another thread;
    plan execution checks it before every dispatched operation.
    """

    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)
    reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        self.reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            message = "Reconciliation pass cancelled"
            if self.reason:
                message = f"{message}: {self.reason}"
            raise ReconcileCancelledError(message)


@dataclass(slots=True, frozen=True, kw_only=True)
class TransformContext:
    """Read-only handle passed to every transformer."""

    context: ReconcileContext
    reader: ClusterReader
    recorder: EventRecorder
    logger: logging.Logger
