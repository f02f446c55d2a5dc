"""Reconciliation pass settings."""

from __future__ import annotations

from dataclasses import dataclass

from rsmkit.domain.model import DEFAULT_FINALIZER

from .env import int_env_var, optional_env_var

DEFAULT_FIELD_MANAGER = "rsmkit"
DEFAULT_TRANSFORM_PARALLELISM = 4


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    finalizer: str = DEFAULT_FINALIZER
    field_manager: str = DEFAULT_FIELD_MANAGER
    transform_parallelism: int = DEFAULT_TRANSFORM_PARALLELISM


def get_reconcile_config() -> ReconcileConfig:
    return ReconcileConfig(
        finalizer=optional_env_var("RSMKIT_FINALIZER", DEFAULT_FINALIZER),
        field_manager=optional_env_var("RSMKIT_FIELD_MANAGER", DEFAULT_FIELD_MANAGER),
        transform_parallelism=int_env_var(
            "RSMKIT_TRANSFORM_PARALLELISM", DEFAULT_TRANSFORM_PARALLELISM, minimum=1
        ),
    )
