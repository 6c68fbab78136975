from __future__ import annotations

import base64
import json
from typing import Any

import pytest

from models.diff import DiffIdentity
from services.errors import RequestFailed
from services.github_client import GitHubClient

API = "https://api.test"


class FakeGitHubClient(GitHubClient):
    """GitHubClient serving canned responses; unknown URLs answer 404."""

    def __init__(self, responses: dict[str, Any] | None = None):
        super().__init__(token="", api_base_url=API)
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    async def fetch_json(self, url: str) -> Any:
        self.calls.append(url)
        if url not in self.responses:
            raise RequestFailed("GitHub API request failed with status 404", status=404)
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value


def make_change(
    kind: str = "USER_EDIT",
    start: tuple[int, int] = (0, 0),
    end: tuple[int, int] = (0, 1),
    **extra: Any,
) -> dict[str, Any]:
    change = {
        "type": kind,
        "start": {"line": start[0], "character": start[1]},
        "end": {"line": end[0], "character": end[1]},
        "creationTimestamp": 1718000000000,
    }
    change.update(extra)
    return change


def encode_blob(payload: Any) -> dict[str, Any]:
    raw = json.dumps(payload).encode("utf-8")
    return {"content": base64.b64encode(raw).decode("ascii"), "encoding": "base64"}


@pytest.fixture
def identity() -> DiffIdentity:
    return DiffIdentity(owner="acme", repo="widgets", pr=7, base="main", head="feature")


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def change():
    return make_change


@pytest.fixture
def blob():
    return encode_blob
