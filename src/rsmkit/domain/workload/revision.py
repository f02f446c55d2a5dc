"""Template revision stamping.

A revision identifies the resolved template a unit is stamped from. The
workload status records the revision every desired unit should run, and each
existing unit is annotated with its target revision so later stages can tell
outdated units apart. Alignment itself matches units by name.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

from rsmkit.domain.model import UPDATE_REVISION_ANNOTATION, ReplicaUnit, UnitTemplate
from rsmkit.domain.tree import SATISFIED, CheckResult

from .instances import resolve_desired_instances

if TYPE_CHECKING:
    from rsmkit.domain.tree import ObjectTree

REVISION_LENGTH = 10


def compute_revision(template: UnitTemplate) -> str:
    payload = json.dumps(
        {"labels": template.labels, "annotations": template.annotations, "spec": template.spec},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:REVISION_LENGTH]


def workload_precondition(tree: ObjectTree) -> CheckResult:
    """Shared precondition: a live root that declares its replica count."""

    root = tree.root
    if root is None:
        return CheckResult.unsatisfied("tree has no root")
    if root.is_deleting:
        return CheckResult.unsatisfied(f"{root.key} is being deleted")
    if root.spec.replicas is None:
        return CheckResult.unsatisfied(f"{root.key} declares no replicas")
    return SATISFIED


class RevisionUpdateReconciler:
    name = "revision-update"

    def pre_condition(self, tree: ObjectTree) -> CheckResult:
        return workload_precondition(tree)

    def reconcile(self, tree: ObjectTree) -> ObjectTree:
        updated = tree.deep_copy()
        root = updated.get_root()
        desired = resolve_desired_instances(root)

        revisions = {
            name: compute_revision(instance.template) for name, instance in desired.items()
        }
        root.status.update_revision = compute_revision(root.spec.template)
        root.status.update_revisions = revisions

        for unit in updated.list(ReplicaUnit):
            revision = revisions.get(unit.name)
            if revision is not None:
                unit.metadata.annotations[UPDATE_REVISION_ANNOTATION] = revision
        return updated
