"""Transformer contracts and the chain that applies them to a mutation graph."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from rsmkit.domain.errors import MergeConflictError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rsmkit.domain.model import ObjectKey

    from .context import TransformContext
    from .dag import MutationGraph
    from .vertex import ObjectVertex

log = getLogger(__name__)

DEFAULT_PARALLELISM = 4


class Transformer(Protocol):
    """One step of graph construction. Reads the context, mutates the graph."""

    name: str

    def transform(self, context: TransformContext, graph: MutationGraph) -> None: ...


@dataclass(slots=True)
class GraphDelta:
    """Changes one parallel member made to its working copy."""

    added: list[ObjectVertex] = field(default_factory=list["ObjectVertex"])
    replaced: list[ObjectVertex] = field(default_factory=list["ObjectVertex"])
    removed: list[ObjectKey] = field(default_factory=list["ObjectKey"])
    edges: list[tuple[ObjectKey, ObjectKey]] = field(
        default_factory=list[tuple["ObjectKey", "ObjectKey"]]
    )

    @property
    def touched(self) -> set[ObjectKey]:
        keys = {vertex.key for vertex in self.added}
        keys.update(vertex.key for vertex in self.replaced)
        keys.update(self.removed)
        return keys

    @classmethod
    def between(cls, base: MutationGraph, result: MutationGraph) -> GraphDelta:
        delta = cls()
        for vertex in result.vertices:
            previous = base.vertex(vertex.key)
            if previous is None:
                delta.added.append(vertex)
            elif previous != vertex:
                delta.replaced.append(vertex)
        delta.removed = [vertex.key for vertex in base.vertices if vertex.key not in result]
        delta.edges = [edge for edge in result.edges if not base.has_edge(*edge)]
        return delta

    def apply_vertices(self, graph: MutationGraph) -> None:
        for key in self.removed:
            graph.remove_vertex(key)
        for vertex in self.replaced:
            graph.replace_vertex(vertex)
        for vertex in self.added:
            graph.add_vertex(vertex)

    def apply_edges(self, graph: MutationGraph) -> None:
        for dependent, dependency in self.edges:
            if not graph.has_edge(dependent, dependency):
                graph.add_edge(dependent, dependency)


@dataclass(slots=True)
class ParallelTransformer:
    """Run member transformers concurrently on independent graph copies.

    Member deltas are merged in registration order; two members touching the
    same object key is a ``MergeConflictError``. The shared graph is only
    mutated once every member has succeeded.
    """

    transformers: Sequence[Transformer]
    max_workers: int = DEFAULT_PARALLELISM
    name: str = "parallel"

    def transform(self, context: TransformContext, graph: MutationGraph) -> None:
        if not self.transformers:
            return
        copies = [graph.copy() for _ in self.transformers]
        workers = max(1, min(self.max_workers, len(self.transformers)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="transformer") as pool:
            futures = [
                pool.submit(transformer.transform, context, working_copy)
                for transformer, working_copy in zip(self.transformers, copies, strict=True)
            ]
            for future in futures:
                future.result()

        deltas = [GraphDelta.between(graph, working_copy) for working_copy in copies]
        owners: dict[ObjectKey, int] = {}
        for index, delta in enumerate(deltas):
            for key in delta.touched:
                owner = owners.setdefault(key, index)
                if owner != index:
                    raise MergeConflictError(
                        f"Transformers {self.transformers[owner].name!r} and "
                        f"{self.transformers[index].name!r} both changed {key}"
                    )
        for delta in deltas:
            delta.apply_vertices(graph)
        for delta in deltas:
            delta.apply_edges(graph)


@dataclass(slots=True)
class TransformerChain:
    """Ordered transformers; stops at the first error."""

    transformers: list[Transformer] = field(default_factory=list[Transformer])

    def append(self, *transformers: Transformer) -> None:
        self.transformers.extend(transformers)

    def extend(self, transformers: Iterable[Transformer]) -> None:
        self.transformers.extend(transformers)

    def apply_to(self, context: TransformContext, graph: MutationGraph) -> None:
        for transformer in self.transformers:
            log.debug("Applying transformer %s", transformer.name)
            transformer.transform(context, graph)
