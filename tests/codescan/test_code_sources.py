"""Tests for local, uploaded and GitHub code sources."""

import base64
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from slopcollector.codescan.sources import (
    GitHubSource,
    from_uploads,
    is_code_file,
    parse_github_url,
    read_directory,
)
from slopcollector.core.exceptions import CodeSourceError


def _write(root: Path, relative: str, content: str = "x") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _response(payload=None, error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    if error is not None:
        response.raise_for_status.side_effect = error
    response.json.return_value = payload
    return response


def _blob(text: str) -> dict:
    return {"content": base64.b64encode(text.encode()).decode(), "encoding": "base64"}


class TestLocalFiles:
    """Tests for read_directory and from_uploads."""

    def test_code_files_in_walk_order(self, tmp_path: Path):
        _write(tmp_path, "README.md")
        _write(tmp_path, "node_modules/pkg/index.js")
        _write(tmp_path, ".git/hooks/pre-commit.sql")
        _write(tmp_path, "src/db.sql", "SELECT 1")
        _write(tmp_path, "src/api/orders.ts")

        files = read_directory(tmp_path, max_files=50)

        assert [f.path for f in files] == ["src/db.sql", "src/api/orders.ts"]
        assert files[0].content == "SELECT 1"

    def test_max_files(self, tmp_path: Path):
        for name in ("a.ts", "b.ts", "c.ts"):
            _write(tmp_path, name)

        assert len(read_directory(tmp_path, max_files=2)) == 2

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(CodeSourceError, match="not a directory"):
            read_directory(tmp_path / "nope", max_files=10)

    def test_uploads_filtered_and_sorted(self):
        uploads = {
            "src\\b.ts": "b",
            "a.sql": "a",
            "notes.txt": "n",
            "node_modules/x.js": "x",
        }

        files = from_uploads(uploads, max_files=10)

        assert [(f.path, f.content) for f in files] == [("a.sql", "a"), ("src/b.ts", "b")]

    def test_is_code_file(self):
        assert is_code_file("app/Page.TSX")
        assert is_code_file("db/queries.py")
        assert not is_code_file("dist/bundle.js")
        assert not is_code_file("styles.css")


class TestParseGithubUrl:
    def test_forms(self):
        assert parse_github_url("https://github.com/acme/shop") == ("acme", "shop")
        assert parse_github_url("https://github.com/acme/shop.git") == ("acme", "shop")
        assert parse_github_url("https://github.com/acme/shop/tree/dev") == ("acme", "shop")
        assert parse_github_url("git@github.com:acme/shop.git") == ("acme", "shop")

    def test_not_github(self):
        assert parse_github_url("https://gitlab.com/acme/shop") is None
        assert parse_github_url("github.com/acme") is None


class TestGitHubSource:
    """Tests for GitHubSource with a mocked requests session."""

    TREE_URL = "https://api.github.com/repos/acme/shop/git/trees/dev?recursive=1"

    def _session(self, responses: dict[str, MagicMock]) -> MagicMock:
        session = MagicMock()
        session.get.side_effect = lambda url, **kwargs: responses[url]
        return session

    def test_fetch_reads_code_blobs(self):
        blob_url = "https://api.github.com/repos/acme/shop/git/blobs/"
        session = self._session(
            {
                self.TREE_URL: _response(
                    {
                        "tree": [
                            {"path": "src/a.ts", "type": "blob", "sha": "s1"},
                            {"path": "README.md", "type": "blob", "sha": "s2"},
                            {"path": "src", "type": "tree", "sha": "s3"},
                            {"path": "src/b.sql", "type": "blob", "sha": "s4"},
                        ]
                    }
                ),
                blob_url + "s1": _response(_blob("supabase.from('posts')")),
                blob_url + "s4": _response(error=requests.HTTPError("404 Not Found")),
            }
        )
        source = GitHubSource("https://github.com/acme/shop", "dev", token="t0k", session=session)

        files = source.fetch(max_files=10)

        assert [(f.path, f.content) for f in files] == [("src/a.ts", "supabase.from('posts')")]
        headers = session.get.call_args_list[0].kwargs["headers"]
        assert headers["Authorization"] == "Bearer t0k"
        assert source.label == "github:acme/shop@dev"

    def test_max_files_limits_blob_requests(self):
        blob_url = "https://api.github.com/repos/acme/shop/git/blobs/"
        tree = [{"path": f"f{i}.ts", "type": "blob", "sha": f"s{i}"} for i in range(5)]
        responses = {self.TREE_URL: _response({"tree": tree})}
        responses.update({blob_url + f"s{i}": _response(_blob("x")) for i in range(5)})
        session = self._session(responses)

        files = GitHubSource("https://github.com/acme/shop", "dev", session=session).fetch(2)

        assert len(files) == 2
        assert session.get.call_count == 3

    def test_tree_failure_raises(self):
        session = self._session(
            {self.TREE_URL: _response(error=requests.HTTPError("404 Not Found"))}
        )
        source = GitHubSource("https://github.com/acme/shop", "dev", session=session)

        with pytest.raises(CodeSourceError, match="GitHub request failed"):
            source.fetch(max_files=10)

    def test_invalid_url(self):
        with pytest.raises(CodeSourceError, match="Invalid GitHub repository URL"):
            GitHubSource("https://example.com/acme/shop")
