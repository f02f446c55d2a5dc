"""Transformers that diff the desired tree against the observed tree.

``ReplicaUnitDiffTransformer`` and ``WorkloadStatusTransformer`` touch disjoint
keys and run as a parallel group; ``OwnershipEdgeTransformer`` then orders the
root's intent after every child intent.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rsmkit.domain.graph import Action, ObjectVertex
from rsmkit.domain.model import ReplicaUnit

if TYPE_CHECKING:
    from rsmkit.domain.graph import MutationGraph, TransformContext
    from rsmkit.domain.model import ClusterObject, ObjectMeta
    from rsmkit.domain.tree import ObjectTree


def _meta_changed(old: ObjectMeta, new: ObjectMeta) -> bool:
    return (
        old.labels != new.labels
        or old.annotations != new.annotations
        or old.finalizers != new.finalizers
        or old.owner_references != new.owner_references
    )


def _spec_changed(old: ClusterObject, new: ClusterObject) -> bool:
    return _meta_changed(old.metadata, new.metadata) or getattr(old, "spec", None) != getattr(
        new, "spec", None
    )


@dataclass(slots=True)
class ReplicaUnitDiffTransformer:
    current: ObjectTree
    desired: ObjectTree
    name: str = "replica-unit-diff"

    def transform(self, context: TransformContext, graph: MutationGraph) -> None:
        current_units = {unit.key: unit for unit in self.current.list(ReplicaUnit)}
        desired_units = {unit.key: unit for unit in self.desired.list(ReplicaUnit)}

        for key, unit in desired_units.items():
            observed = current_units.get(key)
            if observed is None:
                graph.add_vertex(ObjectVertex(obj=copy.deepcopy(unit), action=Action.CREATE))
            elif _spec_changed(observed, unit):
                graph.add_vertex(
                    ObjectVertex(
                        obj=copy.deepcopy(unit),
                        original=copy.deepcopy(observed),
                        action=Action.PATCH,
                    )
                )

        for key, observed in current_units.items():
            if key not in desired_units:
                graph.add_vertex(ObjectVertex(obj=copy.deepcopy(observed), action=Action.DELETE))

        context.logger.debug(
            "Unit diff for %s: %d observed, %d desired, %d intents",
            self.desired.root.key if self.desired.root is not None else "-",
            len(current_units),
            len(desired_units),
            len(graph),
        )


@dataclass(slots=True)
class WorkloadStatusTransformer:
    """Patch the root when its metadata or spec changed, else push its status."""

    current: ObjectTree
    desired: ObjectTree
    name: str = "workload-status"

    def transform(self, context: TransformContext, graph: MutationGraph) -> None:
        del context
        observed = self.current.root
        root = self.desired.root
        if observed is None or root is None:
            return
        if _spec_changed(observed, root):
            graph.add_vertex(
                ObjectVertex(
                    obj=copy.deepcopy(root),
                    original=copy.deepcopy(observed),
                    action=Action.PATCH,
                )
            )
        elif observed.status != root.status:
            graph.add_vertex(ObjectVertex(obj=copy.deepcopy(root), action=Action.STATUS))


@dataclass(slots=True)
class OwnershipEdgeTransformer:
    """Apply every child intent before the root's intent."""

    desired: ObjectTree
    name: str = "ownership-edges"

    def transform(self, context: TransformContext, graph: MutationGraph) -> None:
        del context
        root = self.desired.root
        if root is None or root.key not in graph:
            return
        for vertex in graph.vertices:
            if vertex.key != root.key:
                graph.add_edge(root.key, vertex.key)
