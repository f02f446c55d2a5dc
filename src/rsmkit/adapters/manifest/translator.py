"""Translate manifests (JSON-shaped dicts) to domain objects and back."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from rsmkit.domain.model import (
    ClusterObject,
    InstanceTemplate,
    ObjectMeta,
    OwnerReference,
    ReplicaUnit,
    UnitStatus,
    UnitTemplate,
    Workload,
    WorkloadSpec,
    WorkloadStatus,
)
from rsmkit.domain.scheme import DEFAULT_SCHEME

from .schema import (
    API_VERSION,
    InstanceTemplateManifest,
    ObjectMetaManifest,
    OwnerReferenceManifest,
    ReplicaUnitManifest,
    TemplateMetaManifest,
    UnitStatusManifest,
    UnitTemplateManifest,
    WorkloadManifest,
    WorkloadSpecManifest,
    WorkloadStatusManifest,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rsmkit.domain.scheme import Scheme

log = getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a payload cannot be mapped to a registered kind."""


def from_manifest(payload: Mapping[str, Any], *, scheme: Scheme = DEFAULT_SCHEME) -> ClusterObject:
    kind = payload.get("kind")
    if not isinstance(kind, str) or not scheme.recognizes(kind):
        raise ManifestError(f"Unrecognized kind in manifest: {kind!r}")
    object_type = scheme.object_type_for(kind)
    if object_type is Workload:
        return _workload_from_manifest(WorkloadManifest.model_validate(payload))
    if object_type is ReplicaUnit:
        return _unit_from_manifest(ReplicaUnitManifest.model_validate(payload))
    raise ManifestError(f"No translator for kind {kind!r}")


def to_manifest(obj: ClusterObject) -> dict[str, Any]:
    match obj:
        case Workload():
            model = _workload_to_manifest(obj)
        case ReplicaUnit():
            model = _unit_to_manifest(obj)
        case _:
            raise ManifestError(f"No translator for kind {obj.kind!r}")
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- metadata -----------------------------------------------------------------


def _meta_from_manifest(meta: ObjectMetaManifest) -> ObjectMeta:
    return ObjectMeta(
        name=meta.name,
        namespace=meta.namespace,
        uid=meta.uid,
        generation=meta.generation,
        resource_version=meta.resource_version,
        labels=dict(meta.labels),
        annotations=dict(meta.annotations),
        finalizers=list(meta.finalizers),
        owner_references=[
            OwnerReference(kind=ref.kind, name=ref.name, uid=ref.uid, controller=ref.controller)
            for ref in meta.owner_references
        ],
        deletion_timestamp=meta.deletion_timestamp,
    )


def _meta_to_manifest(meta: ObjectMeta) -> ObjectMetaManifest:
    return ObjectMetaManifest(
        name=meta.name,
        namespace=meta.namespace,
        uid=meta.uid,
        generation=meta.generation,
        resource_version=meta.resource_version,
        labels=dict(meta.labels),
        annotations=dict(meta.annotations),
        finalizers=list(meta.finalizers),
        owner_references=[
            OwnerReferenceManifest(
                kind=ref.kind, name=ref.name, uid=ref.uid, controller=ref.controller
            )
            for ref in meta.owner_references
        ],
        deletion_timestamp=meta.deletion_timestamp,
    )


# --- workload -----------------------------------------------------------------


def _workload_from_manifest(manifest: WorkloadManifest) -> Workload:
    if manifest.api_version != API_VERSION:
        log.warning("Workload %s uses apiVersion %s", manifest.metadata.name, manifest.api_version)
    spec = manifest.spec
    status = manifest.status
    return Workload(
        metadata=_meta_from_manifest(manifest.metadata),
        spec=WorkloadSpec(
            replicas=spec.replicas,
            pod_management_policy=spec.pod_management_policy,
            template=UnitTemplate(
                labels=dict(spec.template.metadata.labels),
                annotations=dict(spec.template.metadata.annotations),
                spec=dict(spec.template.spec),
            ),
            instances=[
                InstanceTemplate(
                    name=instance.name,
                    generate_name=instance.generate_name,
                    replicas=instance.replicas,
                    labels=dict(instance.labels),
                    annotations=dict(instance.annotations),
                    spec=dict(instance.spec),
                )
                for instance in spec.instances
            ],
        ),
        status=WorkloadStatus(
            observed_generation=status.observed_generation,
            replicas=status.replicas,
            ready_replicas=status.ready_replicas,
            current_replicas=status.current_replicas,
            updated_replicas=status.updated_replicas,
            current_revision=status.current_revision,
            update_revision=status.update_revision,
            update_revisions=dict(status.update_revisions),
        ),
    )


def _workload_to_manifest(workload: Workload) -> WorkloadManifest:
    spec = workload.spec
    status = workload.status
    return WorkloadManifest(
        metadata=_meta_to_manifest(workload.metadata),
        spec=WorkloadSpecManifest(
            replicas=spec.replicas,
            pod_management_policy=spec.pod_management_policy,
            template=UnitTemplateManifest(
                metadata=TemplateMetaManifest(
                    labels=dict(spec.template.labels),
                    annotations=dict(spec.template.annotations),
                ),
                spec=dict(spec.template.spec),
            ),
            instances=[
                InstanceTemplateManifest(
                    name=instance.name,
                    generate_name=instance.generate_name,
                    replicas=instance.replicas,
                    labels=dict(instance.labels),
                    annotations=dict(instance.annotations),
                    spec=dict(instance.spec),
                )
                for instance in spec.instances
            ],
        ),
        status=WorkloadStatusManifest(
            observed_generation=status.observed_generation,
            replicas=status.replicas,
            ready_replicas=status.ready_replicas,
            current_replicas=status.current_replicas,
            updated_replicas=status.updated_replicas,
            current_revision=status.current_revision,
            update_revision=status.update_revision,
            update_revisions=dict(status.update_revisions),
        ),
    )


# --- replica unit -------------------------------------------------------------


def _unit_from_manifest(manifest: ReplicaUnitManifest) -> ReplicaUnit:
    return ReplicaUnit(
        metadata=_meta_from_manifest(manifest.metadata),
        spec=dict(manifest.spec),
        status=UnitStatus(phase=manifest.status.phase, ready=manifest.status.ready),
    )


def _unit_to_manifest(unit: ReplicaUnit) -> ReplicaUnitManifest:
    return ReplicaUnitManifest(
        metadata=_meta_to_manifest(unit.metadata),
        spec=dict(unit.spec),
        status=UnitStatusManifest(phase=unit.status.phase, ready=unit.status.ready),
    )
