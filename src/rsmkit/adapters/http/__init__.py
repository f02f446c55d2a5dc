"""Public interface for the HTTP cluster adapter."""

from __future__ import annotations

from .client import MERGE_PATCH_CONTENT_TYPE, HttpClusterClient

__all__ = ["MERGE_PATCH_CONTENT_TYPE", "HttpClusterClient"]
