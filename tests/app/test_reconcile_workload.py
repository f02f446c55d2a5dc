from __future__ import annotations

import logging

import pytest

from rsmkit.adapters.memory import InMemoryCluster
from rsmkit.app import PassResult, reconcile_workload
from rsmkit.config import ReconcileConfig
from rsmkit.domain.errors import InstanceNameConflictError, ReconcileCancelledError
from rsmkit.domain.graph import Action, ReconcileContext
from rsmkit.domain.model import (
    InstanceTemplate,
    ObjectKey,
    PodManagementPolicy,
    ReplicaUnit,
    UnitPhase,
    Workload,
)
from tests.helpers.workloads import RecordingEventRecorder, make_unit, make_workload

KEY = make_workload().key


def _converge(cluster: InMemoryCluster, key: ObjectKey = KEY, *, max_passes: int = 20) -> int:
    for passes in range(1, max_passes + 1):
        if reconcile_workload(key, client=cluster).noop:
            return passes
    raise AssertionError("workload did not converge")


def _unit_names(cluster: InMemoryCluster) -> list[str]:
    return [key.name for key in cluster.keys(ReplicaUnit.KIND)]


def _workload(cluster: InMemoryCluster, key: ObjectKey = KEY) -> Workload:
    workload = cluster.get(key)
    assert isinstance(workload, Workload)
    return workload


def test_missing_workload_is_a_noop(cluster: InMemoryCluster) -> None:
    result = reconcile_workload(KEY, client=cluster)

    assert result == PassResult(key=KEY, found=False)
    assert result.noop


def test_ordered_ready_scale_out_creates_one_unit_per_pass(
    cluster: InMemoryCluster, recorder: RecordingEventRecorder
) -> None:
    cluster.create(make_workload(replicas=3))

    first = reconcile_workload(KEY, client=cluster, recorder=recorder)

    assert first.dispatched == {Action.CREATE: 1, Action.STATUS: 1}
    assert _unit_names(cluster) == ["web-0"]
    assert recorder.reasons == ["SuccessfulCreate"]

    passes = _converge(cluster)

    assert passes == 3
    assert _unit_names(cluster) == ["web-0", "web-1", "web-2"]
    status = _workload(cluster).status
    assert status.replicas == 3
    assert status.updated_replicas == 3
    assert status.current_revision == status.update_revision
    assert status.observed_generation == 1


def test_parallel_converges_in_one_pass(cluster: InMemoryCluster) -> None:
    cluster.create(make_workload(replicas=4, policy=PodManagementPolicy.PARALLEL))

    result = reconcile_workload(KEY, client=cluster)

    assert result.dispatched[Action.CREATE] == 4
    assert _unit_names(cluster) == ["web-0", "web-1", "web-2", "web-3"]
    assert reconcile_workload(KEY, client=cluster).noop


def test_mixed_instance_templates_converge(cluster: InMemoryCluster) -> None:
    key = make_workload("bar").key
    cluster.create(
        make_workload(
            "bar",
            replicas=7,
            instances=[
                InstanceTemplate(name="hello", labels={"role": "leader"}),
                InstanceTemplate(generate_name="foo", replicas=2),
            ],
        )
    )
    cluster.create(make_unit("foo-0", owner="bar"))
    cluster.create(make_unit("bar-1", owner="bar"))

    reconcile_workload(key, client=cluster)
    assert _unit_names(cluster) == ["bar-0", "bar-1", "foo-0"]

    _converge(cluster, key)
    assert _unit_names(cluster) == ["bar-0", "bar-1", "bar-2", "bar-3", "foo-0", "foo-1", "hello"]
    leader = cluster.get(ObjectKey(ReplicaUnit.KIND, "default", "hello"))
    assert leader.metadata.labels["role"] == "leader"


def test_scale_in_drops_highest_ordinals_and_finalizers(
    cluster: InMemoryCluster, recorder: RecordingEventRecorder
) -> None:
    cluster.create(make_workload(replicas=3, policy=PodManagementPolicy.PARALLEL))
    reconcile_workload(KEY, client=cluster)
    workload = _workload(cluster)
    workload.spec.replicas = 1
    workload.spec.pod_management_policy = PodManagementPolicy.ORDERED_READY
    cluster.update(workload)

    result = reconcile_workload(KEY, client=cluster, recorder=recorder)

    assert result.dispatched[Action.DELETE] == 1
    assert _unit_names(cluster) == ["web-0", "web-1"]
    assert recorder.reasons == ["SuccessfulDelete"]

    _converge(cluster)
    assert _unit_names(cluster) == ["web-0"]
    status = _workload(cluster).status
    assert status.replicas == 1
    assert status.observed_generation == 2


def test_unit_status_changes_flow_into_workload_status(cluster: InMemoryCluster) -> None:
    cluster.create(make_workload(replicas=2, policy=PodManagementPolicy.PARALLEL))
    _converge(cluster)
    unit_key = ObjectKey(ReplicaUnit.KIND, "default", "web-1")

    cluster.set_unit_status(unit_key, phase=UnitPhase.RUNNING, ready=True)
    result = reconcile_workload(KEY, client=cluster)

    assert result.dispatched == {Action.STATUS: 1}
    assert _workload(cluster).status.ready_replicas == 1


def test_deleting_workload_only_refreshes_status(cluster: InMemoryCluster) -> None:
    workload = make_workload(replicas=2)
    workload.metadata.finalizers = ["example.com/hold"]
    cluster.create(workload)
    cluster.delete(cluster.get(KEY))

    result = reconcile_workload(KEY, client=cluster)

    assert Action.CREATE not in result.dispatched
    assert _unit_names(cluster) == []


def test_custom_finalizer_is_stamped(cluster: InMemoryCluster) -> None:
    cluster.create(make_workload(replicas=1))

    reconcile_workload(
        KEY, client=cluster, config=ReconcileConfig(finalizer="example.com/cleanup")
    )

    unit = cluster.get(ObjectKey(ReplicaUnit.KIND, "default", "web-0"))
    assert unit.metadata.finalizers == ["example.com/cleanup"]


def test_spec_errors_surface_without_writes(cluster: InMemoryCluster) -> None:
    cluster.create(
        make_workload(
            replicas=3,
            instances=[
                InstanceTemplate(generate_name="db", replicas=2),
                InstanceTemplate(name="db-0"),
            ],
        )
    )
    cluster.writes.clear()

    with pytest.raises(InstanceNameConflictError):
        reconcile_workload(KEY, client=cluster)

    assert cluster.writes == []


def test_cancelled_context_stops_the_pass(cluster: InMemoryCluster) -> None:
    cluster.create(make_workload(replicas=1))
    context = ReconcileContext()
    context.cancel("shutdown")

    with pytest.raises(ReconcileCancelledError):
        reconcile_workload(KEY, client=cluster, context=context)

    assert _unit_names(cluster) == []


def test_pass_logs_through_the_module_logger(
    cluster: InMemoryCluster, caplog: pytest.LogCaptureFixture
) -> None:
    cluster.create(make_workload(replicas=1))

    with caplog.at_level(logging.DEBUG, logger="rsmkit.app"):
        reconcile_workload(KEY, client=cluster)

    assert "Unit diff for Workload/default/web" in caplog.text
    assert "rsmkit.app.web" not in logging.Logger.manager.loggerDict
