"""Code scan endpoints."""

from fastapi import APIRouter, HTTPException

from slopcollector.advice.suggestions import list_code_patterns
from slopcollector.api.deps import GitHubSourceFactoryDep, SessionDep
from slopcollector.api.schemas import CodePatternResponse, CodeScanRequest
from slopcollector.codescan.models import CodeScanResult
from slopcollector.codescan.service import CodeScanService
from slopcollector.codescan.sources import from_uploads
from slopcollector.core.config import get_settings
from slopcollector.core.exceptions import (
    CodeSourceError,
    PersistenceError,
    ProjectNotFoundError,
    SnapshotNotFoundError,
)
from slopcollector.snapshots.service import SnapshotService

router = APIRouter()


@router.post("/projects/{project_id}/code-scan", response_model=CodeScanResult)
def scan_code(
    project_id: str,
    body: CodeScanRequest,
    session: SessionDep,
    github_source_factory: GitHubSourceFactoryDep,
) -> CodeScanResult:
    """Scan uploaded files or a GitHub branch and replace the project's code patterns."""
    max_files = get_settings().code_scan_max_files
    service = CodeScanService(session)
    try:
        # Fail on an unknown project before any GitHub traffic
        service.snapshots.get_project(project_id)
        if body.files is not None:
            files = from_uploads(body.files, max_files)
            source = "upload"
        else:
            github = github_source_factory(body.repo_url or "", body.branch)
            try:
                files = github.fetch(max_files)
            finally:
                github.close()
            source = github.label
        return service.scan_project(project_id, files, source)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (SnapshotNotFoundError, CodeSourceError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/projects/{project_id}/code-patterns", response_model=list[CodePatternResponse])
def get_code_patterns(project_id: str, session: SessionDep) -> list[CodePatternResponse]:
    try:
        SnapshotService(session).get_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    patterns = list_code_patterns(session, project_id)
    return [CodePatternResponse.model_validate(p) for p in patterns]
