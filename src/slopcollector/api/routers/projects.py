"""Project endpoints."""

from fastapi import APIRouter, HTTPException
from sqlalchemy import func, select

from slopcollector.api.deps import PaginationDep, SessionDep
from slopcollector.api.schemas import ProjectCreate, ProjectListResponse, ProjectResponse
from slopcollector.core.logging import get_logger
from slopcollector.storage import Project

logger = get_logger(__name__)

router = APIRouter()


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(body: ProjectCreate, session: SessionDep) -> ProjectResponse:
    """Register a Supabase project."""
    project = Project(
        name=body.name,
        supabase_url=body.supabase_url.rstrip("/"),
        api_key=body.api_key,
        schema_name=body.schema_name,
    )
    session.add(project)
    session.flush()
    logger.info("project_created", project_id=project.project_id, name=project.name)
    return ProjectResponse.model_validate(project)


@router.get("/projects", response_model=ProjectListResponse)
def list_projects(session: SessionDep, pagination: PaginationDep) -> ProjectListResponse:
    skip, limit = pagination
    total = session.execute(select(func.count()).select_from(Project)).scalar() or 0
    stmt = select(Project).order_by(Project.created_at).offset(skip).limit(limit)
    projects = session.execute(stmt).scalars().all()
    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        total=total,
    )


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, session: SessionDep) -> ProjectResponse:
    project = session.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return ProjectResponse.model_validate(project)
