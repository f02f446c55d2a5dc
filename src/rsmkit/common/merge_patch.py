"""JSON merge patch (RFC 7386) helpers used for PATCH dispatch."""

from __future__ import annotations

import copy
from typing import Any


def create_merge_patch(base: dict[str, Any], target: dict[str, Any]) -> dict[str, Any]:
    """Return the merge patch turning ``base`` into ``target``.

    Keys removed in ``target`` are emitted as ``None``. Lists are replaced wholesale.
    """

    patch: dict[str, Any] = {}
    for key, base_value in base.items():
        if key not in target:
            patch[key] = None
            continue
        target_value = target[key]
        if isinstance(base_value, dict) and isinstance(target_value, dict):
            nested = create_merge_patch(base_value, target_value)
            if nested:
                patch[key] = nested
        elif base_value != target_value:
            patch[key] = copy.deepcopy(target_value)
    for key, target_value in target.items():
        if key not in base:
            patch[key] = copy.deepcopy(target_value)
    return patch


def apply_merge_patch(document: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Return a new document with ``patch`` merged into ``document``."""

    result = copy.deepcopy(document)
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = apply_merge_patch(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result
