"""Diff-related data models"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .change import ChangeRecord


class DiffIdentity(BaseModel):
    """Repository coordinates of the diff shown on a page"""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    pr: int | None = None  # None on compare pages
    base: str | None = None
    head: str | None = None


class ProjectedRange(BaseModel):
    """Character range of one line covered by a change"""

    start_char: int
    end_char: int  # exclusive
    record: ChangeRecord


class RenderSegment(BaseModel):
    """A contiguous piece of line text, tagged when a change covers it"""

    text: str
    record: ChangeRecord | None = None
    label: str | None = None  # tooltip
    color: str | None = None
