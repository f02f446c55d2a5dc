"""Recompute the workload status from the units in the tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rsmkit.domain.model import REVISION_LABEL, ReplicaUnit
from rsmkit.domain.tree import SATISFIED, CheckResult

if TYPE_CHECKING:
    from rsmkit.domain.tree import ObjectTree


class StatusReconciler:
    name = "status"

    def pre_condition(self, tree: ObjectTree) -> CheckResult:
        if tree.root is None:
            return CheckResult.unsatisfied("tree has no root")
        return SATISFIED

    def reconcile(self, tree: ObjectTree) -> ObjectTree:
        updated = tree.deep_copy()
        root = updated.get_root()
        status = root.status
        units = updated.list(ReplicaUnit)

        status.observed_generation = root.metadata.generation
        status.replicas = len(units)
        status.ready_replicas = sum(1 for unit in units if unit.is_ready)
        status.updated_replicas = sum(
            1
            for unit in units
            if unit.name in status.update_revisions
            and unit.metadata.labels.get(REVISION_LABEL) == status.update_revisions[unit.name]
        )
        if (
            status.update_revision is not None
            and status.updated_replicas == len(units)
            and len(units) == (root.spec.replicas or 0)
        ):
            status.current_revision = status.update_revision
        status.current_replicas = sum(
            1
            for unit in units
            if status.current_revision is not None
            and unit.metadata.labels.get(REVISION_LABEL) == status.current_revision
        )
        return updated
