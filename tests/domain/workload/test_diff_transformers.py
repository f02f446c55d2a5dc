from __future__ import annotations

from rsmkit.domain.graph import Action, MutationGraph, ParallelTransformer
from rsmkit.domain.model import ReplicaUnit
from rsmkit.domain.workload import (
    OwnershipEdgeTransformer,
    ReplicaUnitDiffTransformer,
    WorkloadStatusTransformer,
)
from tests.helpers.workloads import make_context, make_tree, make_unit, make_workload


def _actions(graph: MutationGraph) -> dict[str, Action]:
    return {vertex.obj.name: vertex.action for vertex in graph.vertices}


def test_unit_diff_emits_create_patch_and_delete() -> None:
    current = make_tree(
        make_workload(), make_unit("web-0"), make_unit("web-1"), make_unit("web-5")
    )
    desired = current.deep_copy()
    desired.delete(make_unit("web-5"))
    desired.add(make_unit("web-2"))
    changed = next(unit for unit in desired.list(ReplicaUnit) if unit.name == "web-1")
    changed.metadata.annotations["note"] = "changed"
    graph = MutationGraph()

    ReplicaUnitDiffTransformer(current, desired).transform(make_context(), graph)

    assert _actions(graph) == {
        "web-1": Action.PATCH,
        "web-2": Action.CREATE,
        "web-5": Action.DELETE,
    }
    patch = graph.vertex(make_unit("web-1").key)
    assert patch is not None
    assert patch.original is not None
    assert "note" not in patch.original.metadata.annotations
    assert patch.obj is not changed


def test_unit_diff_ignores_status_only_changes() -> None:
    current = make_tree(make_workload(), make_unit("web-0"))
    desired = current.deep_copy()
    desired.list(ReplicaUnit)[0].status.ready = True
    graph = MutationGraph()

    ReplicaUnitDiffTransformer(current, desired).transform(make_context(), graph)

    assert len(graph) == 0


def test_workload_status_transformer_pushes_status() -> None:
    current = make_tree(make_workload())
    desired = current.deep_copy()
    desired.get_root().status.replicas = 3
    graph = MutationGraph()

    WorkloadStatusTransformer(current, desired).transform(make_context(), graph)

    assert _actions(graph) == {"web": Action.STATUS}


def test_workload_status_transformer_prefers_patch_for_metadata_changes() -> None:
    current = make_tree(make_workload())
    desired = current.deep_copy()
    desired.get_root().metadata.labels["owner"] = "team-a"
    desired.get_root().status.replicas = 3
    graph = MutationGraph()

    WorkloadStatusTransformer(current, desired).transform(make_context(), graph)

    assert _actions(graph) == {"web": Action.PATCH}


def test_workload_status_transformer_skips_unchanged_or_missing_root() -> None:
    current = make_tree(make_workload())
    graph = MutationGraph()

    WorkloadStatusTransformer(current, current.deep_copy()).transform(make_context(), graph)
    WorkloadStatusTransformer(make_tree(None), make_tree(None)).transform(make_context(), graph)

    assert len(graph) == 0


def test_diff_transformers_run_as_parallel_group_then_edges() -> None:
    current = make_tree(make_workload(), make_unit("web-0"))
    desired = current.deep_copy()
    desired.add(make_unit("web-1"))
    desired.get_root().status.replicas = 2
    graph = MutationGraph()
    context = make_context()

    ParallelTransformer(
        [
            ReplicaUnitDiffTransformer(current, desired),
            WorkloadStatusTransformer(current, desired),
        ]
    ).transform(context, graph)
    OwnershipEdgeTransformer(desired).transform(context, graph)

    root_key = make_workload().key
    assert _actions(graph) == {"web-1": Action.CREATE, "web": Action.STATUS}
    assert graph.has_edge(root_key, make_unit("web-1").key)
    assert graph.apply_order() == [make_unit("web-1").key, root_key]


def test_ownership_edges_require_root_intent() -> None:
    current = make_tree(make_workload())
    desired = current.deep_copy()
    desired.add(make_unit("web-0"))
    graph = MutationGraph()

    ReplicaUnitDiffTransformer(current, desired).transform(make_context(), graph)
    OwnershipEdgeTransformer(desired).transform(make_context(), graph)

    assert graph.edges == ()
