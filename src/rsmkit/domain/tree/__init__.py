"""Object trees and the reconcilers that transform them."""

from __future__ import annotations

from .fetcher import TreeFetcher
from .object_tree import ObjectTree
from .reconciler import SATISFIED, CheckResult, Reconciler, ReconcilerChain

__all__ = [
    "SATISFIED",
    "CheckResult",
    "ObjectTree",
    "Reconciler",
    "ReconcilerChain",
    "TreeFetcher",
]
