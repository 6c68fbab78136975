"""
GitHub API Client - Authenticated JSON fetches against the hosting API
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from models.diff import DiffIdentity
from models.settings import Settings

from .errors import MalformedData, RequestFailed

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
USER_AGENT = "Provenance-Overlay"
NOTES_REF_PREFIX = "tabd"


class GitHubClient:
    """Fetch JSON documents from the GitHub REST API"""

    def __init__(
        self,
        token: str = "",
        api_base_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
    ):
        self.token = token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            token=settings.github_token,
            api_base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout,
        )

    # ========== URL Builders ==========

    def repo_url(self, identity: DiffIdentity) -> str:
        return f"{self.api_base_url}/repos/{identity.owner}/{identity.repo}"

    def notes_ref_url(self, identity: DiffIdentity, content_hash: str) -> str:
        """URL of the notes ref holding the change log for one file on the head branch"""
        ref = quote(f"{NOTES_REF_PREFIX}__{identity.head}__{content_hash}", safe="/")
        return f"{self.repo_url(identity)}/git/ref/notes/{ref}"

    def compare_url(self, identity: DiffIdentity) -> str:
        # TODO: paginate once diffs with more than 100 files need resolving
        spec = quote(f"{identity.base}...{identity.head}", safe="/")
        return f"{self.repo_url(identity)}/compare/{spec}?per_page=100"

    def rate_limit_url(self) -> str:
        return f"{self.api_base_url}/rate_limit"

    # ========== Requests ==========

    def build_headers(self) -> dict[str, str]:
        """Headers pinning the API version, plus the bearer token when configured"""
        headers = {"Accept": GITHUB_ACCEPT, "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch_json(self, url: str) -> Any:
        """GET a URL and decode the JSON body. Raises RequestFailed on non-200."""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=self.build_headers()) as response:
                    if response.status != 200:
                        logger.debug("[GitHubClient] %s returned HTTP %d", url, response.status)
                        raise RequestFailed(
                            f"GitHub API request failed with status {response.status}",
                            status=response.status,
                        )
                    body = await response.text()
        except asyncio.TimeoutError as e:
            raise RequestFailed(f"GitHub API request timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise RequestFailed(f"Network error: {e}") from e

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedData(f"Invalid JSON from {url}: {e}") from e
