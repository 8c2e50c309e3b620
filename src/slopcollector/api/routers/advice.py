"""Advice generation and suggestion endpoints."""

from fastapi import APIRouter, HTTPException

from slopcollector.advice.models import AdviceRunResult, Suggestion
from slopcollector.advice.service import AdviceService
from slopcollector.advice.suggestions import (
    list_code_patterns,
    list_suggestions,
    to_ui_suggestion,
    update_suggestion_status,
)
from slopcollector.api.deps import AdviceGeneratorDep, SessionDep
from slopcollector.api.schemas import AdviceRequest, SuggestionStatusUpdate
from slopcollector.core.exceptions import (
    AdviceCooldownError,
    AdviceGenerationError,
    PersistenceError,
    ProjectNotFoundError,
    SnapshotNotFoundError,
    SuggestionNotFoundError,
)
from slopcollector.core.models import SuggestionStatus
from slopcollector.snapshots.service import SnapshotService

router = APIRouter()


@router.post("/projects/{project_id}/advice", response_model=AdviceRunResult)
def generate_advice(
    project_id: str,
    session: SessionDep,
    generator: AdviceGeneratorDep,
    body: AdviceRequest | None = None,
) -> AdviceRunResult:
    """Generate LLM advice for the latest snapshot and store new suggestions."""
    body = body or AdviceRequest()
    service = AdviceService(session, generator)
    try:
        return service.generate_for_project(
            project_id,
            cooldown_hours=body.cooldown_hours,
            skip_cooldown=body.skip_cooldown,
            include_code_patterns=body.include_code_patterns,
        )
    except (ProjectNotFoundError, SnapshotNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except AdviceCooldownError as e:
        raise HTTPException(status_code=429, detail=str(e)) from e
    except (AdviceGenerationError, PersistenceError) as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get(
    "/projects/{project_id}/suggestions",
    response_model=list[Suggestion],
    response_model_exclude_none=True,
)
def get_suggestions(
    project_id: str,
    session: SessionDep,
    status: SuggestionStatus | None = None,
    include_archived: bool = False,
) -> list[Suggestion]:
    try:
        SnapshotService(session).get_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return list_suggestions(
        session,
        project_id,
        status=status.value if status else None,
        include_archived=include_archived,
    )


@router.patch(
    "/suggestions/{suggestion_id}/status",
    response_model=Suggestion,
    response_model_exclude_none=True,
)
def update_status(
    suggestion_id: str, body: SuggestionStatusUpdate, session: SessionDep
) -> Suggestion:
    """Apply, dismiss, reopen or archive a suggestion."""
    try:
        row = update_suggestion_status(session, suggestion_id, body.action)
    except SuggestionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return to_ui_suggestion(row, list_code_patterns(session, row.project_id))
