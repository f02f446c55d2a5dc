"""Public domain model surface."""

from __future__ import annotations

from rsmkit.domain.model.enums import DeletePropagation, PodManagementPolicy, UnitPhase
from rsmkit.domain.model.meta import (
    DEFAULT_FINALIZER,
    DEFAULT_NAMESPACE,
    INSTANCE_LABEL,
    REVISION_LABEL,
    TEMPLATE_LABEL,
    UPDATE_REVISION_ANNOTATION,
    ObjectKey,
    ObjectMeta,
    OwnerReference,
)
from rsmkit.domain.model.objects import (
    ClusterObject,
    InstanceTemplate,
    ReplicaUnit,
    UnitStatus,
    UnitTemplate,
    Workload,
    WorkloadSpec,
    WorkloadStatus,
)

__all__ = [
    "DEFAULT_FINALIZER",
    "DEFAULT_NAMESPACE",
    "INSTANCE_LABEL",
    "REVISION_LABEL",
    "TEMPLATE_LABEL",
    "UPDATE_REVISION_ANNOTATION",
    "ClusterObject",
    "DeletePropagation",
    "InstanceTemplate",
    "ObjectKey",
    "ObjectMeta",
    "OwnerReference",
    "PodManagementPolicy",
    "ReplicaUnit",
    "UnitPhase",
    "UnitStatus",
    "UnitTemplate",
    "Workload",
    "WorkloadSpec",
    "WorkloadStatus",
]
