"""In-memory object tree: one workload root plus its child objects."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rsmkit.domain.errors import TreeError
from rsmkit.domain.model import ClusterObject, Workload

if TYPE_CHECKING:
    from rsmkit.domain.model import ObjectKey


@dataclass(slots=True)
class ObjectTree:
    """Root workload plus children keyed by ``(kind, namespace, name)``.

    Children keep their insertion slot when overwritten, so ``list`` is stable
    for a given tree value. Reconcilers treat trees as values: they call
    ``deep_copy`` and return the modified copy.
    """

    _root: Workload | None = None
    _children: dict[ObjectKey, ClusterObject] = field(
        default_factory=dict["ObjectKey", ClusterObject]
    )

    @property
    def root(self) -> Workload | None:
        return self._root

    def get_root(self) -> Workload:
        if self._root is None:
            raise TreeError("Object tree has no root")
        return self._root

    def set_root(self, root: Workload) -> None:
        if not isinstance(root, Workload):
            raise TreeError(f"Root must be a Workload, got {type(root).__name__}")
        self._root = root

    def add(self, *objects: ClusterObject) -> None:
        for obj in objects:
            if isinstance(obj, Workload):
                raise TreeError(f"{obj.key} is a root object; use set_root to replace the root")
            self._children[obj.key] = obj

    def delete(self, *objects: ClusterObject) -> None:
        for obj in objects:
            self._children.pop(obj.key, None)

    def get(self, key: ObjectKey) -> ClusterObject | None:
        if self._root is not None and self._root.key == key:
            return self._root
        return self._children.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __len__(self) -> int:
        return len(self._children)

    @property
    def children(self) -> tuple[ClusterObject, ...]:
        return tuple(self._children.values())

    def list[T: ClusterObject](self, kind: type[T]) -> list[T]:
        return [obj for obj in self._children.values() if isinstance(obj, kind)]

    def names[T: ClusterObject](self, kind: type[T]) -> list[str]:
        return [obj.name for obj in self.list(kind)]

    def deep_copy(self) -> ObjectTree:
        return ObjectTree(
            _root=copy.deepcopy(self._root),
            _children={key: copy.deepcopy(obj) for key, obj in self._children.items()},
        )

    def snapshot(self) -> dict[ObjectKey, ClusterObject]:
        """Deep-copied view of every child, keyed by object key."""

        return {key: copy.deepcopy(obj) for key, obj in self._children.items()}
