"""
Change Log Resolver - Find and assemble the change log for a hashed file
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from pydantic import ValidationError

from models.change import ChangeLog, record_adapter
from models.diff import DiffIdentity

from .errors import AnnotationError, MalformedData, NotFound
from .github_client import GitHubClient
from .hashing import find_path_by_hash
from .merge import deep_merge

logger = logging.getLogger(__name__)

LOG_DIRECTORY = ".tabd/log"
LOG_FILE_PREFIX = "tabd-"


def parse_change_log(payload: Any) -> ChangeLog:
    """Build a change log from decoded JSON, dropping records that fail validation"""
    if not isinstance(payload, dict):
        raise MalformedData(f"Change log must be a JSON object, got {type(payload).__name__}")

    raw_changes = payload.get("changes") or []
    if not isinstance(raw_changes, list):
        raise MalformedData("Change log 'changes' must be a list")

    changes = []
    for index, raw in enumerate(raw_changes):
        try:
            changes.append(record_adapter.validate_python(raw))
        except ValidationError as e:
            logger.warning("[ChangeLogResolver] Skipping invalid change #%d: %s", index, e.errors()[0]["msg"])

    version = payload.get("version", 1)
    return ChangeLog(version=version if isinstance(version, int) else 1, changes=changes)


def decode_blob(blob: Any) -> Any:
    """Decode the JSON document carried by a blob/contents API response"""
    content = _field(blob, "content")
    if not isinstance(content, str):
        raise MalformedData("Blob content is not a string")

    try:
        if blob.get("encoding") == "base64":
            content = base64.b64decode(content).decode("utf-8")
        return json.loads(content)
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedData(f"Invalid base64 blob: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedData(f"Invalid JSON in blob: {e}") from e


def is_hidden_path(path: str) -> bool:
    """True when any path segment is dot-prefixed"""
    return any(part.startswith(".") for part in path.split("/"))


def _field(data: Any, key: str | int) -> Any:
    """Index into an API response, reporting unexpected shapes as MalformedData"""
    try:
        return data[key]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedData(f"Unexpected API response shape: missing {key!r}") from e


class ChangeLogResolver:
    """Resolve change logs for the files of one diff.

    Caches (the compare listing and every resolved log) live on the instance,
    so a new resolver is created whenever the page's DiffIdentity changes.
    """

    def __init__(self, identity: DiffIdentity, client: GitHubClient):
        self.identity = identity
        self.client = client
        self._compare_files: list[dict[str, Any]] | None = None
        self._logs: dict[str, ChangeLog] = {}

    async def resolve(self, content_hash: str) -> ChangeLog:
        """Return the change log for a file hash. Raises NotFound when none exists."""
        cached = self._logs.get(content_hash)
        if cached is not None:
            return cached

        try:
            change_log = await self._resolve_from_notes(content_hash)
        except AnnotationError as e:
            logger.debug("[ChangeLogResolver] Notes lookup failed for %s: %s", content_hash, e)
            change_log = await self._resolve_from_compare(content_hash)

        self._logs[content_hash] = change_log
        return change_log

    # ========== Direct Path ==========

    async def _resolve_from_notes(self, content_hash: str) -> ChangeLog:
        """Follow ref -> commit -> tree -> blob for the file's notes ref"""
        if not self.identity.head:
            raise NotFound("No head ref for notes lookup")

        ref = await self.client.fetch_json(self.client.notes_ref_url(self.identity, content_hash))
        commit = await self.client.fetch_json(_field(_field(ref, "object"), "url"))
        tree = await self.client.fetch_json(_field(_field(commit, "tree"), "url"))
        # TODO: merge every note in the tree, newest last, instead of the first entry
        blob = await self.client.fetch_json(_field(_field(_field(tree, "tree"), 0), "url"))

        return parse_change_log(decode_blob(blob))

    # ========== Fallback Path ==========

    async def _get_compare_files(self) -> list[dict[str, Any]]:
        if self._compare_files is None:
            data = await self.client.fetch_json(self.client.compare_url(self.identity))
            files = _field(data, "files")
            if not isinstance(files, list):
                raise MalformedData("Compare 'files' must be a list")
            self._compare_files = sorted(
                (f for f in files if isinstance(f, dict) and isinstance(f.get("filename"), str)),
                key=lambda f: f["filename"],
            )
        return self._compare_files

    async def _resolve_from_compare(self, content_hash: str) -> ChangeLog:
        if not self.identity.base or not self.identity.head:
            raise NotFound(f"No change log for {content_hash} (base and head required for fallback)")

        files = await self._get_compare_files()
        path = find_path_by_hash((f["filename"] for f in files), content_hash)
        if path is None:
            raise NotFound(f"No matching file found for hash {content_hash}")

        if is_hidden_path(path):
            raise NotFound(f"Ignoring hidden path {path}")

        prefix = f"{LOG_DIRECTORY}/{path}/{LOG_FILE_PREFIX}"
        payload: dict[str, Any] = {}
        for entry in files:
            if entry["filename"].startswith(prefix) and entry.get("status") != "removed":
                fragment = await self._fetch_fragment(entry)
                if not isinstance(fragment, dict):
                    raise MalformedData(f"Log fragment {entry['filename']} is not a JSON object")
                payload = deep_merge(payload, fragment)

        change_log = parse_change_log(payload)
        if not change_log.changes:
            raise NotFound(f"No changes recorded for {path}")

        logger.debug(
            "[ChangeLogResolver] Resolved %s to %s with %d changes", content_hash, path, len(change_log.changes)
        )
        return change_log

    async def _fetch_fragment(self, entry: dict[str, Any]) -> Any:
        contents = await self.client.fetch_json(_field(entry, "contents_url"))
        blob = await self.client.fetch_json(_field(contents, "url"))
        return decode_blob(blob)
