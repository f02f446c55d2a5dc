"""Application configuration helpers."""

from __future__ import annotations

from .cluster import ClusterConfig, get_cluster_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .reconcile import ReconcileConfig, get_reconcile_config

__all__ = [
    "ClusterConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "ReconcileConfig",
    "get_cluster_config",
    "get_reconcile_config",
    "require_env_var",
    "require_env_vars",
]
