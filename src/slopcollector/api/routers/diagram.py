"""Schema diagram endpoints (React Flow nodes and edges)."""

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from slopcollector.advice.suggestions import list_suggestions
from slopcollector.api.deps import BuilderDep, SessionDep
from slopcollector.api.schemas import RelayoutResponse
from slopcollector.core.exceptions import ProjectNotFoundError, SnapshotNotFoundError
from slopcollector.core.models import SuggestionStatus
from slopcollector.graphs.models import LayoutDirection
from slopcollector.graphs.tables import snapshot_to_tables
from slopcollector.snapshots.service import SnapshotService

router = APIRouter()


def diagram_scope(project_id: str) -> str:
    return f"{project_id}:"


@router.get("/projects/{project_id}/diagram")
def get_diagram(
    project_id: str,
    session: SessionDep,
    builder: BuilderDep,
    direction: LayoutDirection = Query("TB", description="TB (top-bottom) or LR (left-right)"),
) -> dict[str, Any]:
    """Nodes and edges for the latest snapshot, laid out.

    Tables with pending suggestions are flagged with hasAIIssues.
    """
    service = SnapshotService(session)
    try:
        service.get_project(project_id)
        snapshot = service.get_latest_snapshot(project_id)
    except (ProjectNotFoundError, SnapshotNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    suggestions = list_suggestions(session, project_id, status=SuggestionStatus.PENDING.value)
    layout = builder.build(
        snapshot_to_tables(snapshot),
        suggestions,
        scope=diagram_scope(project_id),
        direction=direction,
    )
    return layout.to_flow()


@router.post("/projects/{project_id}/diagram/relayout", response_model=RelayoutResponse)
def relayout(project_id: str, session: SessionDep, builder: BuilderDep) -> RelayoutResponse:
    """Force the next diagram request to recompute the layout."""
    try:
        SnapshotService(session).get_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    version = builder.relayout(diagram_scope(project_id))
    return RelayoutResponse(project_id=project_id, layout_version=version)
