"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rsmkit.config import ReconcileConfig
from rsmkit.domain.graph import Action, PlanBuilder, ReconcileContext, TransformContext
from rsmkit.domain.ports import NullEventRecorder
from rsmkit.domain.tree import ReconcilerChain, TreeFetcher
from rsmkit.domain.workload import (
    OwnershipEdgeTransformer,
    ReplicasAlignmentReconciler,
    ReplicaUnitDiffTransformer,
    RevisionUpdateReconciler,
    StatusReconciler,
    WorkloadStatusTransformer,
)

if TYPE_CHECKING:
    from rsmkit.domain.model import ObjectKey
    from rsmkit.domain.ports import ClusterClient, EventRecorder


log = getLogger(__name__)


@dataclass(slots=True)
class PassResult:
    """Outcome of one reconciliation pass."""

    key: ObjectKey
    found: bool = True
    dispatched: dict[Action, int] = field(default_factory=dict[Action, int])

    @property
    def total(self) -> int:
        return sum(self.dispatched.values())

    @property
    def noop(self) -> bool:
        return self.total == 0


def default_reconcilers(config: ReconcileConfig) -> ReconcilerChain:
    return ReconcilerChain(
        (
            RevisionUpdateReconciler(),
            ReplicasAlignmentReconciler(finalizer=config.finalizer),
            StatusReconciler(),
        )
    )


def reconcile_workload(
    key: ObjectKey,
    *,
    client: ClusterClient,
    recorder: EventRecorder | None = None,
    config: ReconcileConfig | None = None,
    context: ReconcileContext | None = None,
) -> PassResult:
    """Run one reconciliation pass for the workload at ``key``."""

    effective_config = config or ReconcileConfig()
    effective_context = context or ReconcileContext()
    effective_recorder = recorder or NullEventRecorder()

    current = TreeFetcher(client, key).root().children().complete()
    if current.root is None:
        log.info("Nothing to reconcile for %s", key)
        return PassResult(key=key, found=False)

    desired = default_reconcilers(effective_config).run(current)
    effective_context.raise_if_cancelled()

    transform_context = TransformContext(
        context=effective_context,
        reader=client,
        recorder=effective_recorder,
        logger=log,
    )
    plan = (
        PlanBuilder(
            transform_context,
            client,
            finalizer=effective_config.finalizer,
            field_manager=effective_config.field_manager,
            parallelism=effective_config.transform_parallelism,
        )
        .add_parallel_transformer(
            ReplicaUnitDiffTransformer(current=current, desired=desired),
            WorkloadStatusTransformer(current=current, desired=desired),
        )
        .add_transformer(OwnershipEdgeTransformer(desired=desired))
        .build()
    )
    execution = plan.execute()

    log.info(
        "Reconciled %s: %d intents dispatched (%s)",
        key,
        execution.total,
        ", ".join(f"{action}={count}" for action, count in sorted(execution.dispatched.items()))
        or "no-op",
    )
    return PassResult(key=key, dispatched=dict(execution.dispatched))
