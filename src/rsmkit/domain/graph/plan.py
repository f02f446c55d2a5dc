"""Plan builder and plan execution.

The builder applies the transformer chain to a fresh mutation graph and freezes
the result into a ``Plan``. Executing the plan walks the graph, dependencies
first, and dispatches each intent to the cluster client. Dispatch is
idempotent: creating an existing object and updating, patching or deleting an
absent one count as success, so a partially applied plan is safe to re-derive
and re-run on the next pass.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from rsmkit.domain.errors import AlreadyExistsError, NotFoundError
from rsmkit.domain.model import DeletePropagation
from rsmkit.domain.ports import ClientOptions, EventType

from .dag import MutationGraph
from .transformer import DEFAULT_PARALLELISM, ParallelTransformer, TransformerChain
from .vertex import Action, ObjectVertex

if TYPE_CHECKING:
    from rsmkit.domain.ports import ClusterClient

    from .context import TransformContext
    from .transformer import Transformer

log = getLogger(__name__)


@dataclass(slots=True)
class ExecutionResult:
    """Per-action counts of intents dispatched by one plan execution."""

    dispatched: dict[Action, int] = field(default_factory=dict[Action, int])

    def record(self, action: Action) -> None:
        self.dispatched[action] = self.dispatched.get(action, 0) + 1

    @property
    def total(self) -> int:
        return sum(self.dispatched.values())


class Plan:
    """Frozen mutation graph plus the dispatcher that applies it."""

    def __init__(self, graph: MutationGraph, dispatcher: Dispatcher) -> None:
        self._graph = graph
        self._dispatcher = dispatcher

    @property
    def graph(self) -> MutationGraph:
        return self._graph

    def execute(self) -> ExecutionResult:
        result = ExecutionResult()

        def visit(vertex: ObjectVertex) -> None:
            self._dispatcher.dispatch(vertex)
            result.record(vertex.action)

        self._graph.walk_reverse_topological(visit)
        return result


class PlanBuilder:
    """Collect transformers and build an executable plan for one pass."""

    def __init__(
        self,
        context: TransformContext,
        client: ClusterClient,
        *,
        finalizer: str,
        field_manager: str | None = None,
        parallelism: int = DEFAULT_PARALLELISM,
    ) -> None:
        self._context = context
        self._client = client
        self._finalizer = finalizer
        self._field_manager = field_manager
        self._parallelism = parallelism
        self._chain = TransformerChain()

    def add_transformer(self, *transformers: Transformer) -> PlanBuilder:
        self._chain.append(*transformers)
        return self

    def add_parallel_transformer(self, *transformers: Transformer) -> PlanBuilder:
        self._chain.append(
            ParallelTransformer(transformers=transformers, max_workers=self._parallelism)
        )
        return self

    def build(self) -> Plan:
        graph = MutationGraph()
        self._chain.apply_to(self._context, graph)
        graph.validate()
        self._context.logger.debug("Mutation graph: %s", graph)
        dispatcher = Dispatcher(
            self._context,
            self._client,
            finalizer=self._finalizer,
            field_manager=self._field_manager,
        )
        return Plan(graph, dispatcher)


class Dispatcher:
    """Apply one intent vertex against the cluster client."""

    def __init__(
        self,
        context: TransformContext,
        client: ClusterClient,
        *,
        finalizer: str,
        field_manager: str | None = None,
    ) -> None:
        self._context = context
        self._client = client
        self._finalizer = finalizer
        self._field_manager = field_manager

    def dispatch(self, vertex: ObjectVertex) -> None:
        self._context.context.raise_if_cancelled()
        vertex.validate()
        log.debug("Dispatching %s", vertex)
        match vertex.action:
            case Action.CREATE:
                self._create(vertex)
            case Action.UPDATE:
                self._update(vertex)
            case Action.PATCH:
                self._patch(vertex)
            case Action.DELETE:
                self._delete(vertex)
            case Action.STATUS:
                self._update_status(vertex)
            case _:
                assert_never(vertex.action)

    def _options(self, vertex: ObjectVertex) -> ClientOptions:
        propagation = DeletePropagation.ORPHAN if vertex.orphan else DeletePropagation.BACKGROUND
        return ClientOptions(field_manager=self._field_manager, propagation=propagation)

    def _create(self, vertex: ObjectVertex) -> None:
        try:
            self._client.create(vertex.obj, options=self._options(vertex))
        except AlreadyExistsError:
            log.debug("%s already exists", vertex.key)
            return
        self._record(vertex, "SuccessfulCreate", f"created {vertex.obj.kind} {vertex.obj.name}")

    def _update(self, vertex: ObjectVertex) -> None:
        try:
            self._client.update(vertex.obj, options=self._options(vertex))
        except NotFoundError:
            log.debug("%s is gone, skipping update", vertex.key)

    def _patch(self, vertex: ObjectVertex) -> None:
        original = vertex.original
        if original is None:  # guarded by ObjectVertex.validate
            raise AssertionError(f"Patch vertex {vertex.key} lost its original object")
        try:
            self._client.patch(original, vertex.obj, options=self._options(vertex))
        except NotFoundError:
            log.debug("%s is gone, skipping patch", vertex.key)

    def _delete(self, vertex: ObjectVertex) -> None:
        # vertex.obj stays untouched; a plan may be executed again
        obj = copy.deepcopy(vertex.obj)
        options = self._options(vertex)
        if obj.metadata.remove_finalizer(self._finalizer):
            try:
                self._client.update(obj, options=options)
            except NotFoundError:
                log.debug("%s is gone, skipping finalizer removal", vertex.key)
        if obj.is_deleting:
            return
        try:
            self._client.delete(obj, options=options)
        except NotFoundError:
            log.debug("%s already deleted", vertex.key)
            return
        self._record(vertex, "SuccessfulDelete", f"deleted {obj.kind} {obj.name}")

    def _update_status(self, vertex: ObjectVertex) -> None:
        try:
            self._client.update_status(vertex.obj, options=self._options(vertex))
        except NotFoundError:
            log.debug("%s is gone, skipping status update", vertex.key)

    def _record(self, vertex: ObjectVertex, reason: str, message: str) -> None:
        try:
            self._context.recorder.event(vertex.obj, EventType.NORMAL, reason, message)
        except Exception:  # noqa: BLE001
            log.warning("Dropping event %s for %s", reason, vertex.key, exc_info=True)
