"""
Content Hasher - Match anonymized diff anchors to file paths
"""

from __future__ import annotations

import hashlib
from typing import Iterable


def content_hash(text: str) -> str:
    """SHA-256 of the UTF-8 text as lowercase hex"""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def find_path_by_hash(paths: Iterable[str], target: str) -> str | None:
    """Return the first path whose hash equals target, in iteration order"""
    target = target.lower()
    for path in paths:
        if content_hash(path) == target:
            return path
    return None
