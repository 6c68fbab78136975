from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from models.diff import DiffIdentity
from models.settings import Settings
from services.errors import MalformedData, RequestFailed
from services.github_client import GitHubClient


async def _fetch(path: str, token: str = "", timeout: float = 5.0):
    """Serve a tiny fake API and fetch one path from it"""
    seen_headers = {}

    async def ok(request: web.Request) -> web.Response:
        seen_headers.update(request.headers)
        return web.json_response({"ok": True})

    async def missing(request: web.Request) -> web.Response:
        return web.json_response({"message": "Not Found"}, status=404)

    async def garbage(request: web.Request) -> web.Response:
        return web.Response(text="<html>", content_type="text/html")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/missing", missing)
    app.router.add_get("/garbage", garbage)
    app.router.add_get("/slow", slow)

    async with test_utils.TestServer(app) as server:
        client = GitHubClient(token=token, api_base_url=str(server.make_url("")), timeout_seconds=timeout)
        data = await client.fetch_json(str(server.make_url(path)))
    return data, seen_headers


class TestFetchJson:
    def test_success_with_headers(self) -> None:
        data, headers = asyncio.run(_fetch("/ok", token="ghp_token"))
        assert data == {"ok": True}
        assert headers["Accept"] == "application/vnd.github.v3+json"
        assert headers["Authorization"] == "Bearer ghp_token"
        assert headers["User-Agent"]

    def test_no_token_no_authorization(self) -> None:
        _, headers = asyncio.run(_fetch("/ok"))
        assert "Authorization" not in headers

    def test_http_error_status(self) -> None:
        with pytest.raises(RequestFailed) as excinfo:
            asyncio.run(_fetch("/missing"))
        assert excinfo.value.status == 404
        assert not isinstance(excinfo.value, MalformedData)

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedData):
            asyncio.run(_fetch("/garbage"))

    def test_timeout(self) -> None:
        with pytest.raises(RequestFailed) as excinfo:
            asyncio.run(_fetch("/slow", timeout=0.1))
        assert excinfo.value.status is None


class TestUrls:
    def test_from_settings(self) -> None:
        settings = Settings(github_token="t", api_base_url="https://ghe.example.com/api/v3/", request_timeout=5)
        client = GitHubClient.from_settings(settings)
        assert client.token == "t"
        assert client.api_base_url == "https://ghe.example.com/api/v3"
        assert client.timeout_seconds == 5

    def test_compare_url(self) -> None:
        identity = DiffIdentity(owner="acme", repo="widgets", base="main", head="feature/login")
        assert GitHubClient().compare_url(identity) == (
            "https://api.github.com/repos/acme/widgets/compare/main...feature/login?per_page=100"
        )

    def test_notes_ref_url(self) -> None:
        identity = DiffIdentity(owner="acme", repo="widgets", head="feature")
        assert GitHubClient().notes_ref_url(identity, "ab12") == (
            "https://api.github.com/repos/acme/widgets/git/ref/notes/tabd__feature__ab12"
        )
