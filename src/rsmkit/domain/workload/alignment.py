"""Replica alignment: converge a tree's replica units toward the desired names.

Units are matched by name only; a unit whose name is still desired is never
recreated. Under ``Parallel`` every missing unit is created and every extra unit
deleted in one pass. Under ``OrderedReady`` a pass makes at most one move:

* create: each template group offers its lowest-ordinal missing member; the
  smallest candidate by ``(prefix, ordinal)`` is created
* delete (only when nothing is missing): the extra unit with the largest
  ``(prefix, ordinal)`` goes first, so groups shrink from the top ordinal down
* no move while any unit is terminating
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rsmkit.domain.model import (
    DEFAULT_FINALIZER,
    INSTANCE_LABEL,
    REVISION_LABEL,
    TEMPLATE_LABEL,
    UPDATE_REVISION_ANNOTATION,
    ObjectMeta,
    OwnerReference,
    PodManagementPolicy,
    ReplicaUnit,
    Workload,
)

from .instances import ordinal_sort_key, resolve_desired_instances
from .revision import compute_revision, workload_precondition

if TYPE_CHECKING:
    from rsmkit.domain.tree import CheckResult, ObjectTree

    from .instances import DesiredInstance

log = getLogger(__name__)


@dataclass(slots=True)
class AlignmentDecision:
    """Names to create and delete in this pass."""

    create: list[str] = field(default_factory=list[str])
    delete: list[str] = field(default_factory=list[str])

    @property
    def empty(self) -> bool:
        return not self.create and not self.delete


def plan_alignment(
    desired: dict[str, DesiredInstance],
    current: list[ReplicaUnit],
    policy: PodManagementPolicy,
) -> AlignmentDecision:
    """Decide which units to create and delete for one pass under ``policy``."""

    current_names = {unit.name for unit in current}
    to_create = sorted(
        (name for name in desired if name not in current_names), key=ordinal_sort_key
    )
    to_delete = sorted(
        (name for name in current_names if name not in desired), key=ordinal_sort_key
    )

    if policy is PodManagementPolicy.PARALLEL:
        return AlignmentDecision(create=to_create, delete=to_delete)

    terminating = sorted(unit.name for unit in current if unit.is_deleting)
    if terminating:
        log.debug("Waiting for terminating units: %s", ", ".join(terminating))
        return AlignmentDecision()

    if to_create:
        candidates = _lowest_missing_per_group(desired, current_names)
        return AlignmentDecision(create=[min(candidates, key=ordinal_sort_key)])
    if to_delete:
        return AlignmentDecision(delete=[to_delete[-1]])
    return AlignmentDecision()


def _lowest_missing_per_group(desired: dict[str, DesiredInstance], present: set[str]) -> list[str]:
    groups: dict[str, list[DesiredInstance]] = {}
    for instance in desired.values():
        groups.setdefault(instance.template_name, []).append(instance)

    candidates: list[str] = []
    for members in groups.values():
        members.sort(key=lambda item: -1 if item.ordinal is None else item.ordinal)
        for member in members:
            if member.name not in present:
                candidates.append(member.name)
                break
    return candidates


def build_unit(
    workload: Workload,
    instance: DesiredInstance,
    *,
    revision: str,
    finalizer: str,
) -> ReplicaUnit:
    template = instance.template
    labels = {
        **template.labels,
        INSTANCE_LABEL: workload.name,
        TEMPLATE_LABEL: instance.template_name,
        REVISION_LABEL: revision,
    }
    metadata = ObjectMeta(
        name=instance.name,
        namespace=workload.namespace,
        labels=labels,
        annotations={**template.annotations, UPDATE_REVISION_ANNOTATION: revision},
        owner_references=[
            OwnerReference(kind=Workload.KIND, name=workload.name, uid=workload.metadata.uid)
        ],
    )
    metadata.add_finalizer(finalizer)
    return ReplicaUnit(metadata=metadata, spec=copy.deepcopy(template.spec))


class ReplicasAlignmentReconciler:
    name = "replicas-alignment"

    def __init__(self, *, finalizer: str = DEFAULT_FINALIZER) -> None:
        self._finalizer = finalizer

    def pre_condition(self, tree: ObjectTree) -> CheckResult:
        return workload_precondition(tree)

    def reconcile(self, tree: ObjectTree) -> ObjectTree:
        aligned = tree.deep_copy()
        root = aligned.get_root()
        desired = resolve_desired_instances(root)
        current = aligned.list(ReplicaUnit)
        decision = plan_alignment(desired, current, root.spec.pod_management_policy)
        if decision.empty:
            return aligned

        log.info(
            "Aligning %s (%s): create=%s delete=%s",
            root.key,
            root.spec.pod_management_policy,
            decision.create,
            decision.delete,
        )
        for name in decision.create:
            instance = desired[name]
            revision = root.status.update_revisions.get(name) or compute_revision(
                instance.template
            )
            aligned.add(build_unit(root, instance, revision=revision, finalizer=self._finalizer))

        doomed = set(decision.delete)
        aligned.delete(*(unit for unit in current if unit.name in doomed))
        return aligned
