"""Mutation graph: intent vertices keyed by object key plus ordering edges.

Uses NetworkX for acyclicity checks and topological ordering. An edge
``dependent -> dependency`` means the dependent's intent is applied after the
dependency's intent.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

import networkx as nx

from rsmkit.domain.errors import CycleError, DuplicateVertexError, GraphError

if TYPE_CHECKING:
    from collections.abc import Callable

    from rsmkit.domain.model import ObjectKey

    from .vertex import ObjectVertex

type WalkFunc = Callable[[ObjectVertex], None]


class MutationGraph:
    """Intent vertices for one reconciliation pass."""

    def __init__(self) -> None:
        self._graph: nx.DiGraph[ObjectKey] = nx.DiGraph()

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, key: object) -> bool:
        return self._graph.has_node(key)

    @property
    def vertices(self) -> tuple[ObjectVertex, ...]:
        return tuple(data["vertex"] for _, data in self._graph.nodes(data=True))

    @property
    def edges(self) -> tuple[tuple[ObjectKey, ObjectKey], ...]:
        return tuple(self._graph.edges())

    def vertex(self, key: ObjectKey) -> ObjectVertex | None:
        if not self._graph.has_node(key):
            return None
        return self._graph.nodes[key]["vertex"]

    def add_vertex(self, vertex: ObjectVertex) -> None:
        vertex.validate()
        if self._graph.has_node(vertex.key):
            raise DuplicateVertexError(vertex.key)
        self._graph.add_node(vertex.key, vertex=vertex)

    def replace_vertex(self, vertex: ObjectVertex) -> None:
        """Swap the intent registered for ``vertex.key``, keeping its edges."""

        vertex.validate()
        if not self._graph.has_node(vertex.key):
            raise GraphError(f"No intent registered for {vertex.key}")
        self._graph.nodes[vertex.key]["vertex"] = vertex

    def remove_vertex(self, key: ObjectKey) -> None:
        if not self._graph.has_node(key):
            raise GraphError(f"No intent registered for {key}")
        self._graph.remove_node(key)

    def add_edge(self, dependent: ObjectKey, dependency: ObjectKey) -> None:
        """Order ``dependent`` after ``dependency``. Rejects edges closing a cycle."""

        for key in (dependent, dependency):
            if not self._graph.has_node(key):
                raise GraphError(f"Cannot add edge for unknown vertex {key}")
        if dependent == dependency or nx.has_path(self._graph, dependency, dependent):
            raise CycleError(f"Edge {dependent} -> {dependency} would create a cycle")
        self._graph.add_edge(dependent, dependency)

    def has_edge(self, dependent: ObjectKey, dependency: ObjectKey) -> bool:
        return self._graph.has_edge(dependent, dependency)

    def copy(self) -> MutationGraph:
        """Independent working copy; vertices are deep-copied."""

        clone = MutationGraph()
        for key, data in self._graph.nodes(data=True):
            clone._graph.add_node(key, vertex=copy.deepcopy(data["vertex"]))
        clone._graph.add_edges_from(self._graph.edges())
        return clone

    def validate(self) -> None:
        if not nx.is_directed_acyclic_graph(self._graph):
            try:
                cycle = nx.find_cycle(self._graph)
            except nx.NetworkXNoCycle:
                raise CycleError("Mutation graph contains a cycle") from None
            cycle_str = " -> ".join(str(edge[0]) for edge in cycle)
            raise CycleError(f"Mutation graph contains a cycle: {cycle_str}")
        for vertex in self.vertices:
            vertex.validate()

    def walk_reverse_topological(self, visit: WalkFunc) -> None:
        """Visit every vertex after all vertices it depends on.

        Independent vertices are visited in key order. The first exception
        raised by ``visit`` stops the walk and propagates.
        """

        for key in self.apply_order():
            visit(self._graph.nodes[key]["vertex"])

    def apply_order(self) -> list[ObjectKey]:
        try:
            return list(nx.lexicographical_topological_sort(self._graph.reverse(copy=False)))
        except nx.NetworkXUnfeasible as exc:
            raise CycleError(f"Cannot order mutation graph: {exc}") from exc

    def __str__(self) -> str:
        vertices = ", ".join(str(vertex) for vertex in self.vertices)
        edges = ", ".join(f"{dependent} -> {dependency}" for dependent, dependency in self.edges)
        return f"vertices: [{vertices}], edges: [{edges}]"
