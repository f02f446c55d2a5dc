"""Workload reconcilers: instance resolution, revisions, alignment and status.

Default reconciler order for one pass:
1) revision update (stamp target revisions)
2) replica alignment (decide creates/deletes under the pod management policy)
3) status (recompute counters from the aligned units)
"""

from __future__ import annotations

from .alignment import AlignmentDecision, ReplicasAlignmentReconciler, build_unit, plan_alignment
from .instances import (
    DesiredInstance,
    merge_template,
    ordinal_sort_key,
    parse_ordinal,
    resolve_desired_instances,
)
from .revision import RevisionUpdateReconciler, compute_revision, workload_precondition
from .status import StatusReconciler
from .transformers import (
    OwnershipEdgeTransformer,
    ReplicaUnitDiffTransformer,
    WorkloadStatusTransformer,
)

__all__ = [
    "AlignmentDecision",
    "DesiredInstance",
    "OwnershipEdgeTransformer",
    "ReplicaUnitDiffTransformer",
    "ReplicasAlignmentReconciler",
    "RevisionUpdateReconciler",
    "StatusReconciler",
    "WorkloadStatusTransformer",
    "build_unit",
    "compute_revision",
    "merge_template",
    "ordinal_sort_key",
    "parse_ordinal",
    "plan_alignment",
    "resolve_desired_instances",
    "workload_precondition",
]
