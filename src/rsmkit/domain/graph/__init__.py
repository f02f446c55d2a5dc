"""Dependency-graph reconciliation engine.

Flow of one pass:
1) transformers populate a ``MutationGraph`` with intent vertices and edges
2) ``PlanBuilder.build`` validates the graph and freezes it into a ``Plan``
3) ``Plan.execute`` dispatches intents, dependencies first
"""

from __future__ import annotations

from .context import ReconcileContext, TransformContext
from .dag import MutationGraph
from .plan import Dispatcher, ExecutionResult, Plan, PlanBuilder
from .transformer import GraphDelta, ParallelTransformer, Transformer, TransformerChain
from .vertex import Action, ObjectVertex

__all__ = [
    "Action",
    "Dispatcher",
    "ExecutionResult",
    "GraphDelta",
    "MutationGraph",
    "ObjectVertex",
    "ParallelTransformer",
    "Plan",
    "PlanBuilder",
    "ReconcileContext",
    "TransformContext",
    "Transformer",
    "TransformerChain",
]
