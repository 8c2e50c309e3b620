"""Tests for code scan endpoints."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from slopcollector.api.deps import get_github_source_factory
from slopcollector.codescan.models import SourceFile

UPLOAD = {
    "files": {
        "src/posts.ts": "supabase.from('posts').eq('author_id', uid).order('created_at')",
        "README.md": "supabase.from('users')",
    }
}


class TestCodeScanRouter:
    """Tests for POST /projects/{id}/code-scan."""

    def test_upload(self, test_client: TestClient, synced_project):
        project_id = synced_project["project_id"]

        response = test_client.post(f"/api/v1/projects/{project_id}/code-scan", json=UPLOAD)

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "upload"
        assert data["filesScanned"] == 1
        assert data["patternsFound"] == 2
        assert data["summary"]["sortCount"] == 1
        assert data["suggestions"] == ["Consider indexing posts.author_id (used in WHERE 1x)"]

        listed = test_client.get(f"/api/v1/projects/{project_id}/code-patterns").json()
        assert {(p["column_name"], p["pattern_type"]) for p in listed} == {
            ("author_id", "filter"),
            ("created_at", "sort"),
        }
        assert listed[0]["file_path"] == "src/posts.ts"

    def test_github(self, test_client: TestClient, synced_project):
        source = MagicMock()
        source.label = "github:acme/shop@dev"
        source.fetch.return_value = [SourceFile("q.sql", "SELECT * FROM users WHERE email = $1")]
        calls = []

        def factory(repo_url: str, branch: str):
            calls.append((repo_url, branch))
            return source

        test_client.app.dependency_overrides[get_github_source_factory] = lambda: factory
        response = test_client.post(
            f"/api/v1/projects/{synced_project['project_id']}/code-scan",
            json={"repo_url": "https://github.com/acme/shop", "branch": "dev"},
        )

        assert response.status_code == 200
        assert response.json()["source"] == "github:acme/shop@dev"
        assert response.json()["tablesAnalyzed"] == ["users"]
        assert calls == [("https://github.com/acme/shop", "dev")]
        source.close.assert_called_once()

    def test_invalid_github_url(self, test_client: TestClient, synced_project):
        response = test_client.post(
            f"/api/v1/projects/{synced_project['project_id']}/code-scan",
            json={"repo_url": "https://example.com/acme/shop"},
        )

        assert response.status_code == 400
        assert "Invalid GitHub repository URL" in response.json()["detail"]

    def test_needs_exactly_one_source(self, test_client: TestClient, synced_project):
        url = f"/api/v1/projects/{synced_project['project_id']}/code-scan"

        assert test_client.post(url, json={}).status_code == 422
        both = {**UPLOAD, "repo_url": "https://github.com/acme/shop"}
        assert test_client.post(url, json=both).status_code == 422

    def test_before_sync(self, test_client: TestClient, created_project):
        response = test_client.post(
            f"/api/v1/projects/{created_project['project_id']}/code-scan", json=UPLOAD
        )
        assert response.status_code == 400

    def test_missing_project(self, test_client: TestClient):
        assert test_client.post("/api/v1/projects/nope/code-scan", json=UPLOAD).status_code == 404
        assert test_client.get("/api/v1/projects/nope/code-patterns").status_code == 404
