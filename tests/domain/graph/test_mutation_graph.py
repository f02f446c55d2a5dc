from __future__ import annotations

import pytest

from rsmkit.domain.errors import CycleError, DuplicateVertexError, GraphError, InvalidVertexError
from rsmkit.domain.graph import Action, MutationGraph, ObjectVertex
from rsmkit.domain.model import ReplicaUnit
from tests.helpers.workloads import make_unit, make_workload


def _create(name: str) -> ObjectVertex:
    return ObjectVertex(obj=make_unit(name), action=Action.CREATE)


def test_add_vertex_rejects_second_intent_for_same_key() -> None:
    graph = MutationGraph()
    graph.add_vertex(_create("web-0"))

    with pytest.raises(DuplicateVertexError) as exc:
        graph.add_vertex(ObjectVertex(obj=make_unit("web-0"), action=Action.DELETE))

    assert exc.value.key == make_unit("web-0").key
    assert graph.vertex(make_unit("web-0").key).action is Action.CREATE  # type: ignore[union-attr]


def test_patch_vertex_requires_matching_original() -> None:
    with pytest.raises(InvalidVertexError, match="requires an original"):
        ObjectVertex(obj=make_unit("web-0"), action=Action.PATCH)

    with pytest.raises(InvalidVertexError, match="has original for"):
        ObjectVertex(obj=make_unit("web-0"), original=make_unit("web-1"), action=Action.PATCH)


def test_vertex_without_valid_action_is_rejected() -> None:
    with pytest.raises(InvalidVertexError):
        ObjectVertex(obj=make_unit("web-0"), action="upsert")  # type: ignore[arg-type]


def test_add_edge_requires_known_vertices() -> None:
    graph = MutationGraph()
    graph.add_vertex(_create("web-0"))

    with pytest.raises(GraphError, match="unknown vertex"):
        graph.add_edge(make_unit("web-0").key, make_unit("web-1").key)


def test_add_edge_rejects_cycles_before_mutating() -> None:
    graph = MutationGraph()
    a, b, c = (_create(name) for name in ("web-0", "web-1", "web-2"))
    for vertex in (a, b, c):
        graph.add_vertex(vertex)
    graph.add_edge(a.key, b.key)
    graph.add_edge(b.key, c.key)

    with pytest.raises(CycleError):
        graph.add_edge(c.key, a.key)
    with pytest.raises(CycleError):
        graph.add_edge(a.key, a.key)

    assert graph.edges == ((a.key, b.key), (b.key, c.key))
    graph.validate()


def test_apply_order_visits_dependencies_first() -> None:
    graph = MutationGraph()
    root = ObjectVertex(obj=make_workload(), action=Action.STATUS)
    first, second = _create("web-0"), _create("web-1")
    for vertex in (root, second, first):
        graph.add_vertex(vertex)
    graph.add_edge(root.key, first.key)
    graph.add_edge(root.key, second.key)
    # web-0 waits for web-1 even though it sorts first
    graph.add_edge(first.key, second.key)

    assert graph.apply_order() == [second.key, first.key, root.key]


def test_independent_vertices_follow_key_order() -> None:
    graph = MutationGraph()
    for name in ("web-2", "web-0", "web-1"):
        graph.add_vertex(_create(name))

    visited: list[str] = []
    graph.walk_reverse_topological(lambda vertex: visited.append(vertex.obj.name))

    assert visited == ["web-0", "web-1", "web-2"]


def test_walk_stops_at_first_error() -> None:
    graph = MutationGraph()
    for name in ("web-0", "web-1", "web-2"):
        graph.add_vertex(_create(name))
    visited: list[str] = []

    def visit(vertex: ObjectVertex) -> None:
        if vertex.obj.name == "web-1":
            raise RuntimeError("boom")
        visited.append(vertex.obj.name)

    with pytest.raises(RuntimeError, match="boom"):
        graph.walk_reverse_topological(visit)

    assert visited == ["web-0"]


def test_copy_is_independent() -> None:
    graph = MutationGraph()
    vertex = _create("web-0")
    graph.add_vertex(vertex)

    clone = graph.copy()
    copied = clone.vertex(vertex.key)
    assert copied is not None
    assert isinstance(copied.obj, ReplicaUnit)
    copied.obj.metadata.labels["touched"] = "yes"
    clone.add_vertex(_create("web-1"))

    assert "touched" not in vertex.obj.metadata.labels
    assert len(graph) == 1
    assert len(clone) == 2


def test_replace_and_remove_vertex() -> None:
    graph = MutationGraph()
    a, b = _create("web-0"), _create("web-1")
    graph.add_vertex(a)
    graph.add_vertex(b)
    graph.add_edge(a.key, b.key)

    graph.replace_vertex(ObjectVertex(obj=make_unit("web-0"), action=Action.DELETE))
    assert graph.has_edge(a.key, b.key)
    assert graph.vertex(a.key).action is Action.DELETE  # type: ignore[union-attr]

    graph.remove_vertex(b.key)
    assert b.key not in graph
    assert graph.edges == ()

    with pytest.raises(GraphError):
        graph.remove_vertex(b.key)
    with pytest.raises(GraphError):
        graph.replace_vertex(b)
