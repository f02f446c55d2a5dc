"""Intent vertices: one pending cluster operation for one object."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from rsmkit.domain.errors import InvalidVertexError

if TYPE_CHECKING:
    from rsmkit.domain.model import ClusterObject, ObjectKey


class Action(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"
    STATUS = "status"


@dataclass(slots=True, kw_only=True)
class ObjectVertex:
    """Target object plus the action to apply to it.

    ``original`` is the diff base for ``Action.PATCH``. ``orphan`` deletes the
    object without cascading to its dependents.
    """

    obj: ClusterObject
    action: Action
    original: ClusterObject | None = None
    orphan: bool = False

    def __post_init__(self) -> None:
        self.validate()

    @property
    def key(self) -> ObjectKey:
        return self.obj.key

    def validate(self) -> None:
        if not isinstance(self.action, Action):
            raise InvalidVertexError(f"Vertex {self.obj.key} has no valid action: {self.action!r}")
        if self.action is Action.PATCH:
            if self.original is None:
                raise InvalidVertexError(f"Patch vertex {self.obj.key} requires an original object")
            if self.original.key != self.obj.key:
                raise InvalidVertexError(
                    f"Patch vertex {self.obj.key} has original for {self.original.key}"
                )

    def __str__(self) -> str:
        return f"{{{self.action}: {self.obj.key}}}"
