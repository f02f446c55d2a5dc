"""Wire schemas for workload and replica unit manifests."""

from __future__ import annotations

import logging
from datetime import datetime  # noqa: TC003
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rsmkit.domain.model import DEFAULT_NAMESPACE, PodManagementPolicy, UnitPhase

log = logging.getLogger(__name__)

API_VERSION = "rsmkit.io/v1"


class ManifestModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Manifest %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class OwnerReferenceManifest(ManifestModel):
    kind: str
    name: str
    uid: str | None = None
    controller: bool = True


class ObjectMetaManifest(ManifestModel):
    name: str
    namespace: str = DEFAULT_NAMESPACE
    uid: str | None = None
    generation: int = 0
    resource_version: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    finalizers: list[str] = Field(default_factory=list)
    owner_references: list[OwnerReferenceManifest] = Field(default_factory=list)
    deletion_timestamp: datetime | None = None


class TemplateMetaManifest(ManifestModel):
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class UnitTemplateManifest(ManifestModel):
    metadata: TemplateMetaManifest = Field(default_factory=TemplateMetaManifest)
    spec: dict[str, Any] = Field(default_factory=dict)


class InstanceTemplateManifest(ManifestModel):
    name: str | None = None
    generate_name: str | None = None
    replicas: int | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    spec: dict[str, Any] = Field(default_factory=dict)


class WorkloadSpecManifest(ManifestModel):
    replicas: int | None = None
    pod_management_policy: PodManagementPolicy = PodManagementPolicy.ORDERED_READY
    template: UnitTemplateManifest = Field(default_factory=UnitTemplateManifest)
    instances: list[InstanceTemplateManifest] = Field(default_factory=list)


class WorkloadStatusManifest(ManifestModel):
    observed_generation: int = 0
    replicas: int = 0
    ready_replicas: int = 0
    current_replicas: int = 0
    updated_replicas: int = 0
    current_revision: str | None = None
    update_revision: str | None = None
    update_revisions: dict[str, str] = Field(default_factory=dict)


class WorkloadManifest(ManifestModel):
    api_version: str = API_VERSION
    kind: Literal["Workload"] = "Workload"
    metadata: ObjectMetaManifest
    spec: WorkloadSpecManifest = Field(default_factory=WorkloadSpecManifest)
    status: WorkloadStatusManifest = Field(default_factory=WorkloadStatusManifest)


class UnitStatusManifest(ManifestModel):
    phase: UnitPhase = UnitPhase.PENDING
    ready: bool = False


class ReplicaUnitManifest(ManifestModel):
    api_version: str = API_VERSION
    kind: Literal["ReplicaUnit"] = "ReplicaUnit"
    metadata: ObjectMetaManifest
    spec: dict[str, Any] = Field(default_factory=dict)
    status: UnitStatusManifest = Field(default_factory=UnitStatusManifest)


class ObjectListManifest(ManifestModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
