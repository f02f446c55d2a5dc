"""Cluster object types handled by the reconciliation core.

A ``Workload`` is the root of every object tree; ``ReplicaUnit`` objects are its
children. Both are plain dataclasses so trees can be deep-copied and compared
structurally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from .enums import PodManagementPolicy, UnitPhase
from .meta import ObjectKey, ObjectMeta


@dataclass(kw_only=True)
class ClusterObject:
    """Base for every object stored in the cluster."""

    KIND: ClassVar[str]

    metadata: ObjectMeta

    @property
    def kind(self) -> str:
        return self.KIND

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.KIND, self.metadata.namespace, self.metadata.name)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def is_deleting(self) -> bool:
        return self.metadata.is_deleting


@dataclass(kw_only=True)
class UnitTemplate:
    """Template a replica unit is stamped from."""

    labels: dict[str, str] = field(default_factory=dict[str, str])
    annotations: dict[str, str] = field(default_factory=dict[str, str])
    spec: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(kw_only=True)
class InstanceTemplate:
    """Either an explicit unit (``name``) or a generated group (``generate_name`` x ``replicas``).

    ``labels``, ``annotations`` and ``spec`` are overrides merged over the workload's
    common template.
    """

    name: str | None = None
    generate_name: str | None = None
    replicas: int | None = None
    labels: dict[str, str] = field(default_factory=dict[str, str])
    annotations: dict[str, str] = field(default_factory=dict[str, str])
    spec: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def template_name(self) -> str:
        return self.name or self.generate_name or ""


@dataclass(kw_only=True)
class WorkloadSpec:
    replicas: int | None = None
    pod_management_policy: PodManagementPolicy = PodManagementPolicy.ORDERED_READY
    template: UnitTemplate = field(default_factory=UnitTemplate)
    instances: list[InstanceTemplate] = field(default_factory=list[InstanceTemplate])


@dataclass(kw_only=True)
class WorkloadStatus:
    observed_generation: int = 0
    replicas: int = 0
    ready_replicas: int = 0
    current_replicas: int = 0
    updated_replicas: int = 0
    current_revision: str | None = None
    update_revision: str | None = None
    update_revisions: dict[str, str] = field(default_factory=dict[str, str])


@dataclass(kw_only=True)
class Workload(ClusterObject):
    """Replicated state machine: the root object of a tree."""

    KIND: ClassVar[str] = "Workload"

    spec: WorkloadSpec = field(default_factory=WorkloadSpec)
    status: WorkloadStatus = field(default_factory=WorkloadStatus)


@dataclass(kw_only=True)
class UnitStatus:
    phase: UnitPhase = UnitPhase.PENDING
    ready: bool = False


@dataclass(kw_only=True)
class ReplicaUnit(ClusterObject):
    """One member of a workload's replica set."""

    KIND: ClassVar[str] = "ReplicaUnit"

    spec: dict[str, Any] = field(default_factory=dict[str, Any])
    status: UnitStatus = field(default_factory=UnitStatus)

    @property
    def is_ready(self) -> bool:
        return self.status.ready and self.status.phase is UnitPhase.RUNNING
