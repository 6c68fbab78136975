from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from main import app
from routers import annotate as annotate_router
from routers import config as config_router
from services.config_manager import CONFIG_DIR_ENV, ConfigManager

from conftest import API, FakeGitHubClient, encode_blob, make_change

PR_URL = "https://github.com/acme/widgets/pull/42/files"
FILE_HASH = "cafe01"
PR_BLOB = json.dumps(
    {
        "payload": {
            "pullRequest": {
                "headRepositoryOwnerLogin": "acme",
                "headRepositoryName": "widgets",
                "number": 42,
                "baseBranch": "main",
                "headBranch": "feature",
            }
        }
    }
)


@pytest.fixture
def github(tmp_path, monkeypatch) -> FakeGitHubClient:
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
    ConfigManager.reset_instance()
    annotate_router.sessions.clear()

    fake = FakeGitHubClient()
    monkeypatch.setattr(annotate_router.GitHubClient, "from_settings", classmethod(lambda cls, settings: fake))
    yield fake

    annotate_router.sessions.clear()
    ConfigManager.reset_instance()


@pytest.fixture
def client(github) -> TestClient:
    return TestClient(app)


def serve_log(fake: FakeGitHubClient) -> None:
    notes = f"{API}/repos/acme/widgets/git/ref/notes/tabd__feature__{FILE_HASH}"
    fake.responses[notes] = {"object": {"url": f"{API}/c"}}
    fake.responses[f"{API}/c"] = {"tree": {"url": f"{API}/t"}}
    fake.responses[f"{API}/t"] = {"tree": [{"url": f"{API}/b"}]}
    fake.responses[f"{API}/b"] = encode_blob(
        {"version": 1, "changes": [make_change("AI_GENERATED", start=(0, 4), end=(0, 9), aiName="Copilot")]}
    )


def annotate_body(**overrides) -> dict:
    body = {
        "url": PR_URL,
        "embedded_data": [PR_BLOB],
        "regions": [
            {
                "anchor": f"diff-{FILE_HASH}",
                "lines": [{"anchor": f"diff-{FILE_HASH}R1", "text": "def greet(name):"}],
            }
        ],
    }
    body.update(overrides)
    return body


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestAnnotateEndpoint:
    def test_annotates_when_enabled(self, client, github) -> None:
        serve_log(github)
        assert client.put("/api/config", json={"githubIntegration": True}).status_code == 200

        response = client.post("/api/annotate", json=annotate_body())

        assert response.status_code == 200
        data = response.json()
        assert data["page_id"]
        assert data["identity"]["head"] == "feature"
        region = data["regions"][0]
        assert (region["state"], region["status"]) == ("done", "annotated")
        segments = region["lines"][0]["segments"]
        assert [s["text"] for s in segments] == ["def ", "greet", "(name):"]
        assert segments[1]["record"]["type"] == "AI_GENERATED"
        assert segments[1]["record"]["aiName"] == "Copilot"
        assert segments[1]["label"].startswith("AI Generated under your control • Copilot")
        assert segments[0]["record"] is None

    def test_disabled_integration_does_nothing(self, client, github) -> None:
        serve_log(github)

        response = client.post("/api/annotate", json=annotate_body())

        assert response.status_code == 200
        assert response.json()["regions"] == []
        assert github.calls == []

    def test_page_session_reused(self, client, github) -> None:
        serve_log(github)
        client.put("/api/config", json={"githubIntegration": True})

        first = client.post("/api/annotate", json=annotate_body(page_id="page-1")).json()
        calls = len(github.calls)
        second = client.post("/api/annotate", json=annotate_body(page_id="page-1")).json()

        assert first["page_id"] == second["page_id"] == "page-1"
        assert second["regions"][0]["status"] == "annotated"
        # Cached change log: no further requests
        assert len(github.calls) == calls

    def test_processed_regions_skipped(self, client, github) -> None:
        client.put("/api/config", json={"githubIntegration": True})
        body = annotate_body()
        body["regions"][0]["processed"] = True

        assert client.post("/api/annotate", json=body).json()["regions"] == []

    def test_invalid_page_identity(self, client, github) -> None:
        client.put("/api/config", json={"githubIntegration": True})

        data = client.post("/api/annotate", json=annotate_body(embedded_data=["{}"])).json()

        assert data["identity"] is None
        assert data["regions"] == []

    def test_malformed_page_metadata(self, client, github) -> None:
        client.put("/api/config", json={"githubIntegration": True})
        blob = json.loads(PR_BLOB)
        blob["payload"]["pullRequest"]["number"] = "n/a"

        response = client.post("/api/annotate", json=annotate_body(embedded_data=[json.dumps(blob)]))

        assert response.status_code == 200
        assert response.json()["identity"] is None
        assert response.json()["regions"] == []
        assert github.calls == []

    def test_end_page(self, client, github) -> None:
        client.post("/api/annotate", json=annotate_body(page_id="page-2"))

        assert client.delete("/api/annotate/page-2").status_code == 200
        assert client.delete("/api/annotate/page-2").status_code == 404


class TestConfigEndpoint:
    def test_token_masked(self, client) -> None:
        client.put("/api/config", json={"githubToken": "ghp_1234567890abcd"})

        data = client.get("/api/config").json()

        assert data["githubToken"] == "ghp_**********abcd"
        assert data["clipboardTracking"] == "known"

    def test_empty_update_rejected(self, client) -> None:
        assert client.put("/api/config", json={}).status_code == 400

    def test_invalid_value_rejected(self, client) -> None:
        assert client.put("/api/config", json={"clipboardTracking": "sometimes"}).status_code == 422

    def test_validate_success(self, client, monkeypatch) -> None:
        fake = FakeGitHubClient({"https://api.github.com/rate_limit": {"rate": {"remaining": 59}}})
        fake.api_base_url = "https://api.github.com"
        monkeypatch.setattr(config_router.GitHubClient, "from_settings", classmethod(lambda cls, settings: fake))

        data = client.post("/api/config/validate").json()

        assert data["valid"] is True
        assert "59 requests remaining" in data["message"]
        assert data["authenticated"] is False

    def test_validate_failure(self, client, monkeypatch) -> None:
        fake = FakeGitHubClient()
        monkeypatch.setattr(config_router.GitHubClient, "from_settings", classmethod(lambda cls, settings: fake))

        data = client.post("/api/config/validate").json()

        assert data["valid"] is False
        assert data["message"].startswith("Connection failed")
