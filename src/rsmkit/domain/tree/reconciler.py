"""Reconciler contracts and the chain that threads an object tree through them.

Reconcilers are pure tree-to-tree functions: no cluster I/O, no in-place
mutation of the input tree. An unsatisfied precondition is a skip signal, not
an error. There is no retry loop here; the outer control loop re-runs the
whole pass on the next trigger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .object_tree import ObjectTree

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CheckResult:
    satisfied: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> CheckResult:
        return cls(satisfied=True)

    @classmethod
    def unsatisfied(cls, reason: str) -> CheckResult:
        return cls(satisfied=False, reason=reason)


SATISFIED = CheckResult.ok()


class Reconciler(Protocol):
    name: str

    def pre_condition(self, tree: ObjectTree) -> CheckResult: ...

    def reconcile(self, tree: ObjectTree) -> ObjectTree: ...


@dataclass(slots=True)
class ReconcilerChain:
    """Run reconcilers in order; the first error propagates."""

    reconcilers: tuple[Reconciler, ...] = field(default_factory=tuple)

    def with_reconciler(self, reconciler: Reconciler) -> ReconcilerChain:
        """Return a new chain appending ``reconciler`` at the end."""

        return ReconcilerChain(reconcilers=(*self.reconcilers, reconciler))

    def extend(self, reconcilers: Iterable[Reconciler]) -> ReconcilerChain:
        return ReconcilerChain(reconcilers=(*self.reconcilers, *tuple(reconcilers)))

    def run(self, tree: ObjectTree) -> ObjectTree:
        current = tree
        for reconciler in self.reconcilers:
            check = reconciler.pre_condition(current)
            if not check.satisfied:
                log.debug("Skipping reconciler %s: %s", reconciler.name, check.reason)
                continue
            current = reconciler.reconcile(current)
        return current
