"""Annotate API data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .diff import DiffIdentity, RenderSegment


class RegionState(str, Enum):
    """Processing state of a diff region"""

    UNSEEN = "unseen"
    PROCESSING = "processing"
    DONE = "done"


class LineSnapshot(BaseModel):
    """A line cell as rendered on the page"""

    anchor: str  # diff-<hex>R<n>, or the left-side/other anchor
    text: str


class RegionSnapshot(BaseModel):
    """A diff table as rendered on the page"""

    anchor: str  # diff-<hex>
    processed: bool = False  # already annotated by an earlier pass
    lines: list[LineSnapshot] = []


class AnnotateRequest(BaseModel):
    """Snapshot of a diff page to annotate"""

    page_id: str | None = None  # reuse caches across passes of one page view
    url: str
    embedded_data: list[str] = []  # raw JSON blobs embedded in the page
    branch_value: str | None = None  # separately rendered head branch
    regions: list[RegionSnapshot] = []


class LineResult(BaseModel):
    anchor: str
    segments: list[RenderSegment]


class RegionResult(BaseModel):
    """Outcome of processing one region"""

    anchor: str
    state: RegionState
    status: str  # "annotated", "not_found", "failed", "pending", "skipped"
    error: str | None = None
    lines: list[LineResult] = []


class AnnotateResponse(BaseModel):
    page_id: str
    identity: DiffIdentity | None = None
    regions: list[RegionResult] = []


class StreamEvent(BaseModel):
    """SSE stream event"""

    type: str  # "region", "done", "error"
    region: RegionResult | None = None
    metadata: dict | None = None
    done: bool = False
    error: str | None = None
