"""Builder that reads a workload and its replica units into an object tree.

Each step is skipped once an earlier step recorded an error; ``complete``
returns the tree or raises that first error.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rsmkit.domain.errors import NotFoundError
from rsmkit.domain.model import INSTANCE_LABEL, ReplicaUnit, Workload

from .object_tree import ObjectTree

if TYPE_CHECKING:
    from collections.abc import Callable

    from rsmkit.domain.model import ObjectKey
    from rsmkit.domain.ports import ClusterReader

log = getLogger(__name__)


class TreeFetcher:
    def __init__(self, reader: ClusterReader, key: ObjectKey) -> None:
        if key.kind != Workload.KIND:
            raise ValueError(f"Tree roots must be {Workload.KIND} objects, got {key.kind}")
        self._reader = reader
        self._key = key
        self._tree = ObjectTree()
        self._error: Exception | None = None
        self._root_missing = False

    def _wrap(self, step: Callable[[], None]) -> TreeFetcher:
        if self._error is not None or self._root_missing:
            return self
        try:
            step()
        except Exception as exc:  # noqa: BLE001
            self._error = exc
        return self

    def root(self) -> TreeFetcher:
        def step() -> None:
            try:
                obj = self._reader.get(self._key)
            except NotFoundError:
                log.info("Workload %s not found", self._key)
                self._root_missing = True
                return
            if not isinstance(obj, Workload):
                raise TypeError(f"{self._key} resolved to {type(obj).__name__}")
            self._tree.set_root(obj)

        return self._wrap(step)

    def children(self) -> TreeFetcher:
        def step() -> None:
            root = self._tree.get_root()
            units = self._reader.list(
                ReplicaUnit.KIND,
                namespace=root.namespace,
                labels={INSTANCE_LABEL: root.name},
            )
            for unit in units:
                if unit.metadata.owner_references and not unit.metadata.is_controlled_by(
                    Workload.KIND, root.name
                ):
                    log.warning("Ignoring %s: controlled by another owner", unit.key)
                    continue
                self._tree.add(unit)

        return self._wrap(step)

    def complete(self) -> ObjectTree:
        if self._error is not None:
            raise self._error
        return self._tree
