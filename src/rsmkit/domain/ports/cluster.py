"""Ports for reading and writing objects in the backing cluster store.

Implementations raise ``NotFoundError`` / ``AlreadyExistsError`` from
``rsmkit.domain.errors`` for expected-absence outcomes and other ``ClusterError``
subclasses for everything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rsmkit.domain.model import DeletePropagation

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from rsmkit.domain.model import ClusterObject, ObjectKey


@dataclass(slots=True, frozen=True, kw_only=True)
class ClientOptions:
    """Per-call options supplied by the graph layer."""

    field_manager: str | None = None
    propagation: DeletePropagation = DeletePropagation.BACKGROUND
    dry_run: bool = False


@runtime_checkable
class ClusterReader(Protocol):
    """Read-only access handed to transformers."""

    def get(self, key: ObjectKey) -> ClusterObject: ...

    def list(
        self,
        kind: str,
        *,
        namespace: str,
        labels: Mapping[str, str] | None = None,
    ) -> Sequence[ClusterObject]: ...


@runtime_checkable
class ClusterClient(ClusterReader, Protocol):
    """Read/write access used by plan execution."""

    def create(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None: ...

    def update(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None: ...

    def patch(
        self,
        base: ClusterObject,
        target: ClusterObject,
        *,
        options: ClientOptions | None = None,
    ) -> None: ...

    def delete(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None: ...

    def update_status(
        self, obj: ClusterObject, *, options: ClientOptions | None = None
    ) -> None: ...
