"""In-memory cluster store implementing the ``ClusterClient`` port.

Used by tests and local dry runs. It mimics the server-side behaviour the
reconciliation core relies on:

* every stored write bumps the object's resource version; a write whose content
  equals the stored object is a no-op
* ``update`` rejects a stale resource version with ``ConflictError``
* ``update`` and ``patch`` never touch status; ``update_status`` touches only status
* spec changes bump ``metadata.generation``
* ``delete`` on an object with finalizers only marks it terminating; the object
  is removed once its last finalizer is dropped
* controlled children are deleted along with their owner unless the propagation
  policy is ``Orphan``
"""

from __future__ import annotations

import copy
import itertools
import uuid
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from rsmkit.common.merge_patch import apply_merge_patch, create_merge_patch
from rsmkit.domain.errors import AlreadyExistsError, ConflictError, NotFoundError
from rsmkit.domain.model import DeletePropagation
from rsmkit.domain.scheme import DEFAULT_SCHEME

from .manifest import from_manifest, to_manifest

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rsmkit.domain.model import ClusterObject, ObjectKey
    from rsmkit.domain.ports import ClientOptions
    from rsmkit.domain.scheme import Scheme

log = getLogger(__name__)

_SERVER_OWNED_METADATA = ("resourceVersion", "uid", "generation", "deletionTimestamp")


class InMemoryCluster:
    def __init__(
        self,
        objects: Iterable[ClusterObject] = (),
        *,
        scheme: Scheme = DEFAULT_SCHEME,
    ) -> None:
        self._scheme = scheme
        self._store: dict[ObjectKey, ClusterObject] = {}
        self._versions = itertools.count(1)
        self._faults: dict[tuple[str, ObjectKey], Exception] = {}
        self.writes: list[tuple[str, ObjectKey]] = []
        for obj in objects:
            self.create(obj)
        self.writes.clear()

    # --- test helpers ---------------------------------------------------------

    def inject_error(self, verb: str, key: ObjectKey, error: Exception) -> None:
        """Make the next ``verb`` call on ``key`` raise ``error``."""

        self._faults[(verb, key)] = error

    def stored(self, key: ObjectKey) -> ClusterObject | None:
        obj = self._store.get(key)
        return None if obj is None else copy.deepcopy(obj)

    def keys(self, kind: str | None = None) -> list[ObjectKey]:
        return sorted(key for key in self._store if kind is None or key.kind == kind)

    def set_unit_status(self, key: ObjectKey, **changes: Any) -> None:
        """Simulate the unit runtime reporting status."""

        obj = self._require(key)
        for name, value in changes.items():
            setattr(obj.status, name, value)  # pyright: ignore[reportAttributeAccessIssue]
        self._bump(obj)

    # --- reads ----------------------------------------------------------------

    def get(self, key: ObjectKey) -> ClusterObject:
        self._maybe_fail("get", key)
        return copy.deepcopy(self._require(key))

    def list(
        self,
        kind: str,
        *,
        namespace: str,
        labels: Mapping[str, str] | None = None,
    ) -> list[ClusterObject]:
        self._scheme.info_for(kind)
        selector = dict(labels or {})
        matches = [
            obj
            for key, obj in self._store.items()
            if key.kind == kind
            and key.namespace == namespace
            and all(obj.metadata.labels.get(k) == v for k, v in selector.items())
        ]
        return [copy.deepcopy(obj) for obj in sorted(matches, key=lambda item: item.name)]

    # --- writes ---------------------------------------------------------------

    def create(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        key = obj.key
        self._maybe_fail("create", key)
        self._scheme.info_for(obj.kind)
        if key in self._store:
            raise AlreadyExistsError(f"{key} already exists", key=key)
        if options is not None and options.dry_run:
            return
        stored = copy.deepcopy(obj)
        stored.metadata.uid = stored.metadata.uid or str(uuid.uuid4())
        stored.metadata.generation = max(stored.metadata.generation, 1)
        stored.metadata.deletion_timestamp = None
        self._store[key] = stored
        self._bump(stored)
        self._record("create", key)
        obj.metadata.uid = stored.metadata.uid
        obj.metadata.resource_version = stored.metadata.resource_version

    def update(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        key = obj.key
        self._maybe_fail("update", key)
        stored = self._require(key)
        version = obj.metadata.resource_version
        if version is not None and version != stored.metadata.resource_version:
            raise ConflictError(
                f"{key}: resource version {version} is stale "
                f"(current {stored.metadata.resource_version})",
                key=key,
            )
        if options is not None and options.dry_run:
            return
        self._write(stored, copy.deepcopy(obj), verb="update")
        obj.metadata.resource_version = self._version_of(key, stored)

    def patch(
        self,
        base: ClusterObject,
        target: ClusterObject,
        *,
        options: ClientOptions | None = None,
    ) -> None:
        key = target.key
        self._maybe_fail("patch", key)
        stored = self._require(key)
        patch = create_merge_patch(to_manifest(base), to_manifest(target))
        patch.pop("status", None)
        metadata_patch = patch.get("metadata")
        if isinstance(metadata_patch, dict):
            for name in _SERVER_OWNED_METADATA:
                metadata_patch.pop(name, None)
        if not patch or patch == {"metadata": {}}:
            return
        if options is not None and options.dry_run:
            return
        merged = from_manifest(apply_merge_patch(to_manifest(stored), patch), scheme=self._scheme)
        self._write(stored, merged, verb="patch")
        target.metadata.resource_version = self._version_of(key, stored)

    def delete(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        key = obj.key
        self._maybe_fail("delete", key)
        stored = self._require(key)
        if options is not None and options.dry_run:
            return
        propagation = options.propagation if options is not None else DeletePropagation.BACKGROUND
        self._delete(stored, propagation)

    def update_status(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        key = obj.key
        self._maybe_fail("update_status", key)
        stored = self._require(key)
        if options is not None and options.dry_run:
            return
        status = copy.deepcopy(getattr(obj, "status", None))
        if status == getattr(stored, "status", None):
            return
        setattr(stored, "status", status)  # noqa: B010
        self._bump(stored)
        self._record("update_status", key)
        obj.metadata.resource_version = stored.metadata.resource_version

    # --- internals ------------------------------------------------------------

    def _write(self, stored: ClusterObject, incoming: ClusterObject, *, verb: str) -> None:
        """Replace the stored metadata and spec with ``incoming``'s, keeping server fields."""

        meta = incoming.metadata
        meta.uid = stored.metadata.uid
        meta.resource_version = stored.metadata.resource_version
        meta.deletion_timestamp = stored.metadata.deletion_timestamp
        meta.generation = stored.metadata.generation
        new_spec = getattr(incoming, "spec", None)
        if meta == stored.metadata and new_spec == getattr(stored, "spec", None):
            return

        if new_spec != getattr(stored, "spec", None):
            meta.generation = stored.metadata.generation + 1
        stored.metadata = meta
        setattr(stored, "spec", new_spec)  # noqa: B010
        self._bump(stored)
        self._record(verb, stored.key)
        if stored.is_deleting and not meta.finalizers:
            self._remove(stored.key)

    def _delete(self, stored: ClusterObject, propagation: DeletePropagation) -> None:
        key = stored.key
        if propagation is not DeletePropagation.ORPHAN:
            for child in self._controlled_by(stored):
                self._delete(child, propagation)
        if stored.metadata.finalizers:
            if stored.is_deleting:
                return
            stored.metadata.deletion_timestamp = datetime.now(UTC)
            self._bump(stored)
            self._record("delete", key)
            return
        self._record("delete", key)
        self._remove(key)

    def _controlled_by(self, owner: ClusterObject) -> list[ClusterObject]:
        return [
            obj
            for obj in self._store.values()
            if obj.namespace == owner.namespace
            and obj.metadata.is_controlled_by(owner.kind, owner.name)
        ]

    def _remove(self, key: ObjectKey) -> None:
        log.debug("Removing %s from store", key)
        del self._store[key]

    def _require(self, key: ObjectKey) -> ClusterObject:
        obj = self._store.get(key)
        if obj is None:
            raise NotFoundError(f"{key} not found", key=key)
        return obj

    def _version_of(self, key: ObjectKey, stored: ClusterObject) -> str | None:
        current = self._store.get(key, stored)
        return current.metadata.resource_version

    def _bump(self, obj: ClusterObject) -> None:
        obj.metadata.resource_version = str(next(self._versions))

    def _record(self, verb: str, key: ObjectKey) -> None:
        self.writes.append((verb, key))

    def _maybe_fail(self, verb: str, key: ObjectKey) -> None:
        error = self._faults.pop((verb, key), None)
        if error is not None:
            raise error
