"""Project sync: introspect and append a new snapshot row."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slopcollector.core.config import get_settings
from slopcollector.core.exceptions import (
    PersistenceError,
    ProjectNotFoundError,
    SnapshotNotFoundError,
)
from slopcollector.core.logging import get_logger, log_context
from slopcollector.introspection.client import SupabaseRestClient
from slopcollector.introspection.introspector import IntrospectionReport, SchemaIntrospector
from slopcollector.introspection.models import DatabaseSchemaSnapshot
from slopcollector.snapshots.assembler import snapshot_from_row, snapshot_to_row_data
from slopcollector.storage.models import Project, SchemaSnapshot

logger = get_logger(__name__)

NO_TABLES_MESSAGE = (
    "No tables found. Check the project URL and API key, or that the schema is exposed."
)

ClientFactory = Callable[[Project], SupabaseRestClient]


class SyncResult(BaseModel):
    """Outcome of one sync."""

    project_id: str
    snapshot_id: str | None = None
    table_count: int = 0
    column_count: int = 0
    index_count: int = 0
    foreign_key_count: int = 0
    message: str = "Schema synced"

    @property
    def synced(self) -> bool:
        return self.snapshot_id is not None


def default_client_factory(project: Project) -> SupabaseRestClient:
    settings = get_settings()
    return SupabaseRestClient(
        project.supabase_url,
        project.api_key,
        timeout=settings.http_timeout,
        sql_function=settings.sql_rpc_function,
    )


class SnapshotService:
    """Runs syncs and reads snapshots for projects.

    Concurrent syncs for one project are not serialized; each inserts
    its own row and the newest created_at is "latest".

    Args:
        session: Database session (committed by the caller's scope)
        client_factory: Builds the REST client for a project
    """

    def __init__(self, session: Session, client_factory: ClientFactory | None = None):
        self.session = session
        self.client_factory = client_factory or default_client_factory

    def get_project(self, project_id: str) -> Project:
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def sync_project(self, project_id: str) -> SyncResult:
        """Introspect the project and persist a new snapshot.

        Zero tables is not an error: nothing is stored and the result
        carries an explanatory message.

        Raises:
            ProjectNotFoundError: Unknown project
            PersistenceError: The insert or update failed
        """
        project = self.get_project(project_id)

        with log_context(project_id=project_id):
            snapshot, report = self._introspect(project)

            if snapshot.is_empty:
                logger.warning("sync_found_no_tables", warnings=report.warnings)
                return SyncResult(project_id=project_id, message=NO_TABLES_MESSAGE)

            row = self.save_snapshot(project, snapshot, report.to_dict())

            logger.info("sync_complete", snapshot_id=row.snapshot_id)
            return SyncResult(
                project_id=project_id,
                snapshot_id=row.snapshot_id,
                table_count=len(snapshot.tables),
                column_count=len(snapshot.columns),
                index_count=len(snapshot.indexes),
                foreign_key_count=report.resolved_foreign_keys,
            )

    def _introspect(self, project: Project) -> tuple[DatabaseSchemaSnapshot, IntrospectionReport]:
        settings = get_settings()
        client = self.client_factory(project)
        try:
            introspector = SchemaIntrospector(
                client,
                schema=project.schema_name,
                max_workers=settings.introspection_workers,
            )
            snapshot = introspector.introspect()
            return snapshot, introspector.last_report
        finally:
            client.close()

    def save_snapshot(
        self,
        project: Project,
        snapshot: DatabaseSchemaSnapshot,
        statistics: dict[str, Any] | None = None,
    ) -> SchemaSnapshot:
        """Insert a snapshot row and stamp the project's last sync time."""
        now = datetime.now(UTC)
        row = SchemaSnapshot(
            project_id=project.project_id,
            statistics={
                "table_count": len(snapshot.tables),
                "column_count": len(snapshot.columns),
                "index_count": len(snapshot.indexes),
                **(statistics or {}),
            },
            created_at=now,
            **snapshot_to_row_data(snapshot),
        )
        try:
            self.session.add(row)
            project.last_synced_at = now
            self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store schema snapshot: {e}") from e
        return row

    def get_latest_row(self, project_id: str) -> SchemaSnapshot:
        """Newest snapshot row for the project.

        Raises:
            SnapshotNotFoundError: The project was never synced
        """
        stmt = (
            select(SchemaSnapshot)
            .where(SchemaSnapshot.project_id == project_id)
            .order_by(SchemaSnapshot.created_at.desc())
            .limit(1)
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        if row is None:
            raise SnapshotNotFoundError()
        return row

    def get_latest_snapshot(self, project_id: str) -> DatabaseSchemaSnapshot:
        return snapshot_from_row(self.get_latest_row(project_id))

    def list_snapshots(
        self, project_id: str, skip: int = 0, limit: int = 100
    ) -> list[SchemaSnapshot]:
        """Snapshot rows for a project, newest first."""
        stmt = (
            select(SchemaSnapshot)
            .where(SchemaSnapshot.project_id == project_id)
            .order_by(SchemaSnapshot.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())
