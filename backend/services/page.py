"""
Page Model - Diff page identity, anchors and in-memory region views
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from pydantic import ValidationError

from models.annotate import AnnotateRequest, RegionState
from models.diff import DiffIdentity, RenderSegment

from .errors import InvalidPage
from .merge import deep_merge

PR_FILES_URL_RE = re.compile(r"^https://github\.com/[^/]+/[^/]+/pull/\d+/files")
COMPARE_URL_RE = re.compile(r"^https://github\.com/[^/]+/[^/]+/compare/[^/]+")
PR_PATH_RE = re.compile(r"/([^/]+)/([^/]+)/pull/(\d+)")
COMPARE_PATH_RE = re.compile(r"/([^/]+)/([^/]+)/compare/([^/]+)")

REGION_ANCHOR_RE = re.compile(r"diff-([a-f0-9]+)")
LINE_ANCHOR_RE = re.compile(r"diff-([a-f0-9]+)R(\d+)")


def is_diff_page(url: str) -> bool:
    """PR files pages and compare pages carry annotatable diffs"""
    return bool(PR_FILES_URL_RE.match(url) or COMPARE_URL_RE.match(url))


def parse_region_hash(anchor: str) -> str | None:
    match = REGION_ANCHOR_RE.search(anchor)
    return match.group(1) if match else None


def parse_line_anchor(anchor: str) -> tuple[str, int] | None:
    """Return (hash, zero-based line number) for a right-side line anchor"""
    match = LINE_ANCHOR_RE.search(anchor)
    if not match:
        return None
    return match.group(1), int(match.group(2)) - 1


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def merge_embedded_data(blobs: list[str]) -> dict[str, Any]:
    """Parse and deep-merge the JSON blobs embedded in a page"""
    data: dict[str, Any] = {}
    for blob in blobs:
        try:
            parsed = json.loads(blob)
        except json.JSONDecodeError as e:
            raise InvalidPage(f"Embedded data is not valid JSON: {e}") from e
        if isinstance(parsed, dict):
            data = deep_merge(data, parsed)
    return data


def _identity_from_pull_request(data: dict[str, Any], branch_value: str | None) -> DiffIdentity | None:
    pull_request = _dig(data, "payload", "pullRequest")
    if isinstance(pull_request, dict):
        return DiffIdentity(
            owner=pull_request.get("headRepositoryOwnerLogin") or "",
            repo=pull_request.get("headRepositoryName") or "",
            pr=pull_request.get("number"),
            base=pull_request.get("baseBranch"),
            head=pull_request.get("headBranch"),
        )

    # Older layout: repository props plus the branch rendered in the copy-branch button
    props = data.get("props")
    base = _dig(props, "currentTopic", "refInfo", "name")
    if isinstance(props, dict) and props.get("number") and props.get("repo") and base and branch_value:
        return DiffIdentity(
            owner=props.get("owner") or "",
            repo=props["repo"],
            pr=props["number"],
            base=base,
            head=branch_value,
        )
    return None


def resolve_identity(url: str, embedded_data: list[str], branch_value: str | None = None) -> DiffIdentity:
    """Determine the repository coordinates of a diff page. Raises InvalidPage."""
    try:
        return _resolve_identity(url, embedded_data, branch_value)
    except ValidationError as e:
        raise InvalidPage(f"Malformed diff page metadata: {e}") from e


def _resolve_identity(url: str, embedded_data: list[str], branch_value: str | None) -> DiffIdentity:
    path = urlsplit(url).path

    if PR_PATH_RE.search(path):
        identity = _identity_from_pull_request(merge_embedded_data(embedded_data), branch_value)
        if identity is not None:
            # Any pullRequest object selects this shape, complete or not
            if not identity.owner or not identity.repo:
                raise InvalidPage("Pull request metadata without a head repository")
            return identity

    compare_match = COMPARE_PATH_RE.search(path)
    if compare_match:
        owner, repo, ref_spec = compare_match.groups()
        if "..." not in ref_spec:
            base = _dig(merge_embedded_data(embedded_data), "props", "currentTopic", "refInfo", "name")
            if not base:
                raise InvalidPage("Compare page without a base ref")
            ref_spec = f"{base}...{ref_spec}"
        base, _, head = ref_spec.partition("...")
        return DiffIdentity(owner=owner, repo=repo, pr=None, base=base or None, head=head or None)

    raise InvalidPage("Not a valid GitHub diff page")


# ========== Region Views ==========


@dataclass
class LineView:
    """A line cell; apply_segments is the only write-back into the page"""

    anchor: str
    text: str
    segments: list[RenderSegment] | None = None

    def apply_segments(self, segments: list[RenderSegment]) -> None:
        self.segments = segments


@dataclass
class RegionView:
    """A diff table and its line cells, in document order"""

    anchor: str
    lines: list[LineView] = field(default_factory=list)
    state: RegionState = RegionState.UNSEEN


@dataclass
class PageView:
    url: str
    embedded_data: list[str] = field(default_factory=list)
    branch_value: str | None = None
    regions: list[RegionView] = field(default_factory=list)

    @classmethod
    def from_request(cls, request: AnnotateRequest) -> "PageView":
        return cls(
            url=request.url,
            embedded_data=list(request.embedded_data),
            branch_value=request.branch_value,
            regions=[
                RegionView(
                    anchor=region.anchor,
                    lines=[LineView(anchor=line.anchor, text=line.text) for line in region.lines],
                    state=RegionState.DONE if region.processed else RegionState.UNSEEN,
                )
                for region in request.regions
            ],
        )

    def identity(self) -> DiffIdentity:
        return resolve_identity(self.url, self.embedded_data, self.branch_value)

    def unseen_regions(self) -> list[RegionView]:
        return [region for region in self.regions if region.state == RegionState.UNSEEN]
