"""Error taxonomy of the reconciliation core and its cluster collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rsmkit.domain.model import ObjectKey


class ReconcileError(RuntimeError):
    """Base for errors raised while running a reconciliation pass."""


class WorkloadSpecError(ReconcileError):
    """The workload declares an invalid desired state. Not retried by the core."""


class InstanceNameConflictError(WorkloadSpecError):
    """Two instance templates claim the same unit name."""

    def __init__(self, name: str, *, first: str, second: str) -> None:
        super().__init__(
            f"Instance name {name!r} is claimed by template {first!r} and template {second!r}"
        )
        self.name = name


class TreeError(ReconcileError):
    """Object tree invariant violated."""


class GraphError(ReconcileError):
    """Mutation graph construction error."""


class CycleError(GraphError):
    """The mutation graph contains a dependency cycle."""


class DuplicateVertexError(GraphError):
    """A second intent was registered for the same object in one pass."""

    def __init__(self, key: ObjectKey) -> None:
        super().__init__(f"Intent for {key} is already registered")
        self.key = key


class InvalidVertexError(GraphError):
    """A vertex is missing its action or required snapshot."""


class MergeConflictError(GraphError):
    """Parallel transformers mutated the same object key."""


class ReconcileCancelledError(ReconcileError):
    """The execution context was cancelled."""


class ClusterError(RuntimeError):
    """Raised by cluster collaborators for failed API calls."""

    def __init__(self, message: str, *, key: ObjectKey | None = None) -> None:
        super().__init__(message)
        self.key = key


class NotFoundError(ClusterError):
    """The addressed object does not exist."""


class AlreadyExistsError(ClusterError):
    """An object with the same key already exists."""


class ConflictError(ClusterError):
    """Optimistic concurrency check failed (stale resource version)."""


class TransientClusterError(ClusterError):
    """Network or availability failure; the outer loop may retry the pass."""
