"""Where scanned code comes from: a local checkout, uploads, or GitHub."""

from __future__ import annotations

import base64
import binascii
import os
import re
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

import requests

from slopcollector.codescan.models import SourceFile
from slopcollector.core.exceptions import CodeSourceError
from slopcollector.core.logging import get_logger
from slopcollector.core.models.base import Result

logger = get_logger(__name__)

CODE_EXTENSIONS = frozenset({".ts", ".tsx", ".js", ".jsx", ".sql", ".py"})
SKIPPED_DIRS = frozenset(
    {".git", ".next", ".venv", "__pycache__", "build", "dist", "node_modules", "venv"}
)
GITHUB_API = "https://api.github.com"

_GITHUB_URL = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s]+)")


def is_code_file(path: str) -> bool:
    parts = PurePosixPath(path).parts
    if any(part in SKIPPED_DIRS for part in parts[:-1]):
        return False
    return PurePosixPath(path).suffix.lower() in CODE_EXTENSIONS


def read_directory(root: Path, max_files: int) -> list[SourceFile]:
    """Code files under `root` in path order, at most `max_files`.

    Unreadable files are skipped.

    Raises:
        CodeSourceError: `root` is not a directory
    """
    if not root.is_dir():
        raise CodeSourceError(f"{root} is not a directory")

    files: list[SourceFile] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            relative = path.relative_to(root).as_posix()
            if not is_code_file(relative):
                continue
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("code_file_unreadable", path=relative, error=str(e))
                continue
            files.append(SourceFile(relative, content))
            if len(files) >= max_files:
                return files
    return files


def from_uploads(uploads: Mapping[str, str], max_files: int) -> list[SourceFile]:
    """Uploaded `{path: content}` files that look like code, in path order."""
    paths = sorted(p for p in uploads if is_code_file(p.replace("\\", "/")))
    return [SourceFile(p.replace("\\", "/"), uploads[p]) for p in paths[:max_files]]


def parse_github_url(url: str) -> tuple[str, str] | None:
    """(owner, repo) from an https or ssh GitHub URL.

    >>> parse_github_url("git@github.com:acme/shop.git")
    ('acme', 'shop')
    """
    match = _GITHUB_URL.search(url)
    if match is None:
        return None
    repo = match.group(2).removesuffix(".git")
    return (match.group(1), repo) if repo else None


class GitHubSource:
    """Reads a repository branch through the GitHub REST API.

    Files come from the recursive git tree and are fetched blob by blob.
    A blob that cannot be read is skipped; a tree that cannot be read
    fails the scan.

    Args:
        repo_url: Repository URL, https or ssh form
        branch: Branch (or any tree-ish) to read
        token: Optional token for private repositories
        timeout: Per-request timeout in seconds
        session: Optional requests.Session (for connection reuse or tests)
    """

    def __init__(
        self,
        repo_url: str,
        branch: str = "main",
        token: str | None = None,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ):
        parsed = parse_github_url(repo_url)
        if parsed is None:
            raise CodeSourceError(f"Invalid GitHub repository URL: {repo_url}")
        self.owner, self.repo = parsed
        self.branch = branch
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def label(self) -> str:
        return f"github:{self.owner}/{self.repo}@{self.branch}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json", "User-Agent": "SlopCollector"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_json(self, url: str) -> Result[dict[str, Any]]:
        try:
            response = self._session.get(url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            return Result.fail(f"GitHub request failed: {e}")
        except ValueError as e:
            return Result.fail(f"GitHub returned invalid JSON: {e}")

        if not isinstance(data, dict):
            return Result.fail("GitHub response is not a JSON object")
        return Result.ok(data)

    def _blob_text(self, sha: str) -> Result[str]:
        url = f"{GITHUB_API}/repos/{self.owner}/{self.repo}/git/blobs/{sha}"
        result = self._get_json(url)
        if not result.success or result.value is None:
            return Result.fail(result.error or "empty blob response")

        content = result.value.get("content") or ""
        if result.value.get("encoding") != "base64":
            return Result.ok(str(content))
        try:
            return Result.ok(base64.b64decode(content).decode("utf-8", errors="replace"))
        except (binascii.Error, ValueError) as e:
            return Result.fail(f"Blob {sha} is not valid base64: {e}")

    def fetch(self, max_files: int) -> list[SourceFile]:
        """Code files from the branch, at most `max_files`.

        Raises:
            CodeSourceError: The tree could not be listed
        """
        tree_url = (
            f"{GITHUB_API}/repos/{self.owner}/{self.repo}/git/trees/{self.branch}?recursive=1"
        )
        tree = self._get_json(tree_url)
        if not tree.success or tree.value is None:
            raise CodeSourceError(tree.error or f"Could not list {self.label}")

        entries = [
            item
            for item in tree.value.get("tree") or []
            if isinstance(item, dict)
            and item.get("type") == "blob"
            and is_code_file(str(item.get("path", "")))
        ]
        if tree.value.get("truncated"):
            logger.warning("github_tree_truncated", repo=self.label)

        files: list[SourceFile] = []
        for item in entries[:max_files]:
            blob = self._blob_text(str(item.get("sha", "")))
            if not blob.success or blob.value is None:
                logger.warning("github_blob_skipped", path=item.get("path"), error=blob.error)
                continue
            files.append(SourceFile(str(item["path"]), blob.value))

        logger.info("github_files_fetched", repo=self.label, files=len(files))
        return files

    def close(self) -> None:
        self._session.close()
