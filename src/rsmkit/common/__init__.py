from __future__ import annotations

from .logging import configure_logging
from .merge_patch import apply_merge_patch, create_merge_patch

__all__ = [
    "apply_merge_patch",
    "configure_logging",
    "create_merge_patch",
]
