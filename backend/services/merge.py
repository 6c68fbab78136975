"""
Structural Merger - Deep-merge JSON-like structures
Used for embedded page metadata blobs and for change log fragments.
"""

from __future__ import annotations

from typing import Any


def deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into a copy of target.

    Lists concatenate (target first, no dedup), mappings merge recursively,
    everything else from source overwrites. Keys only in target are kept.
    """
    result = dict(target)

    for key, value in source.items():
        if isinstance(value, list):
            current = result.get(key)
            if isinstance(current, list):
                result[key] = [*current, *value]
            else:
                result[key] = list(value)
        elif isinstance(value, dict):
            current = result.get(key)
            if isinstance(current, dict):
                result[key] = deep_merge(current, value)
            else:
                result[key] = deep_merge({}, value)
        else:
            result[key] = value

    return result
