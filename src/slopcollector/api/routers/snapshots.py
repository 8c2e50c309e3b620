"""Sync and snapshot endpoints."""

from fastapi import APIRouter, HTTPException

from slopcollector.api.deps import BuilderDep, ClientFactoryDep, PaginationDep, SessionDep
from slopcollector.api.schemas import (
    SnapshotListResponse,
    SnapshotResponse,
    SnapshotSummary,
    SyncResponse,
)
from slopcollector.core.exceptions import (
    PersistenceError,
    ProjectNotFoundError,
    SnapshotNotFoundError,
)
from slopcollector.snapshots.assembler import snapshot_from_row
from slopcollector.snapshots.service import SnapshotService

router = APIRouter()


@router.post("/projects/{project_id}/sync", response_model=SyncResponse)
def sync_project(
    project_id: str,
    session: SessionDep,
    builder: BuilderDep,
    client_factory: ClientFactoryDep,
) -> SyncResponse:
    """Introspect the project and store a new snapshot.

    Zero tables is reported in the message, not as an error.
    """
    service = SnapshotService(session, client_factory)
    try:
        result = service.sync_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    if result.synced:
        builder.invalidate(f"{project_id}:")

    return SyncResponse(synced=result.synced, **result.model_dump())


@router.get("/projects/{project_id}/snapshots", response_model=SnapshotListResponse)
def list_snapshots(
    project_id: str, session: SessionDep, pagination: PaginationDep
) -> SnapshotListResponse:
    skip, limit = pagination
    service = SnapshotService(session)
    try:
        service.get_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    rows = service.list_snapshots(project_id, skip=skip, limit=limit)
    return SnapshotListResponse(
        snapshots=[SnapshotSummary.model_validate(r) for r in rows],
        total=len(rows),
    )


@router.get("/projects/{project_id}/snapshots/latest", response_model=SnapshotResponse)
def get_latest_snapshot(project_id: str, session: SessionDep) -> SnapshotResponse:
    service = SnapshotService(session)
    try:
        service.get_project(project_id)
        row = service.get_latest_row(project_id)
    except (ProjectNotFoundError, SnapshotNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return SnapshotResponse(
        snapshot_id=row.snapshot_id,
        project_id=row.project_id,
        created_at=row.created_at,
        statistics=row.statistics,
        snapshot=snapshot_from_row(row).to_wire(),
    )
