"""Public interface for the manifest adapter."""

from __future__ import annotations

from .schema import API_VERSION, ObjectListManifest, ReplicaUnitManifest, WorkloadManifest
from .translator import ManifestError, from_manifest, to_manifest

__all__ = [
    "API_VERSION",
    "ManifestError",
    "ObjectListManifest",
    "ReplicaUnitManifest",
    "WorkloadManifest",
    "from_manifest",
    "to_manifest",
]
