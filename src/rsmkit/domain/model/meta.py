"""Object identity and metadata shared by every cluster object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_NAMESPACE = "default"

INSTANCE_LABEL = "rsmkit.io/instance"
TEMPLATE_LABEL = "rsmkit.io/instance-template"
REVISION_LABEL = "rsmkit.io/revision"
UPDATE_REVISION_ANNOTATION = "rsmkit.io/update-revision"
DEFAULT_FINALIZER = "rsmkit.io/finalizer"


class ObjectKey(NamedTuple):
    """Identity of one object in the cluster store."""

    kind: str
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.namespace}/{self.name}"


@dataclass(slots=True, frozen=True, kw_only=True)
class OwnerReference:
    kind: str
    name: str
    uid: str | None = None
    controller: bool = True


@dataclass(slots=True, kw_only=True)
class ObjectMeta:
    name: str
    namespace: str = DEFAULT_NAMESPACE
    uid: str | None = None
    generation: int = 0
    resource_version: str | None = None
    labels: dict[str, str] = field(default_factory=dict[str, str])
    annotations: dict[str, str] = field(default_factory=dict[str, str])
    finalizers: list[str] = field(default_factory=list[str])
    owner_references: list[OwnerReference] = field(default_factory=list[OwnerReference])
    deletion_timestamp: datetime | None = None

    @property
    def is_deleting(self) -> bool:
        return self.deletion_timestamp is not None

    def add_finalizer(self, finalizer: str) -> bool:
        """Add ``finalizer`` and report whether the list changed."""

        if finalizer in self.finalizers:
            return False
        self.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str) -> bool:
        """Remove ``finalizer`` and report whether the list changed."""

        if finalizer not in self.finalizers:
            return False
        self.finalizers = [item for item in self.finalizers if item != finalizer]
        return True

    def is_controlled_by(self, kind: str, name: str) -> bool:
        return any(
            ref.controller and ref.kind == kind and ref.name == name
            for ref in self.owner_references
        )
