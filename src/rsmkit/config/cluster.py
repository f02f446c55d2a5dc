"""Cluster API connection values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import float_env_var, optional_env_var, require_env_var

DEFAULT_API_GROUP = "rsmkit.io"
DEFAULT_API_VERSION = "v1"
DEFAULT_API_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ClusterConfig:
    """Holds the cluster API endpoint and credentials."""

    api_url: str
    token: str | None = None
    timeout_seconds: float = DEFAULT_API_TIMEOUT_SECONDS
    api_group: str = DEFAULT_API_GROUP
    api_version: str = DEFAULT_API_VERSION

    @property
    def api_prefix(self) -> str:
        return f"/apis/{self.api_group}/{self.api_version}"


def get_cluster_config() -> ClusterConfig:
    token = os.getenv("RSMKIT_API_TOKEN")
    return ClusterConfig(
        api_url=require_env_var("RSMKIT_API_URL"),
        token=token.strip() if token and token.strip() else None,
        timeout_seconds=float_env_var("RSMKIT_API_TIMEOUT", DEFAULT_API_TIMEOUT_SECONDS),
        api_group=optional_env_var("RSMKIT_API_GROUP", DEFAULT_API_GROUP),
        api_version=optional_env_var("RSMKIT_API_VERSION", DEFAULT_API_VERSION),
    )
