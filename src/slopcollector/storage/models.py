"""Persistence models.

Projects, append-only schema snapshots, optimization suggestions,
code-usage patterns and analysis job records.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from slopcollector.storage.base import Base


def _now() -> datetime:
    return datetime.now(UTC)


class Project(Base):
    """A connected Supabase/PostgREST project."""

    __tablename__ = "projects"

    project_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    supabase_url: Mapped[str] = mapped_column(String, nullable=False)
    api_key: Mapped[str] = mapped_column(String, nullable=False)
    schema_name: Mapped[str] = mapped_column(String, nullable=False, default="public")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime)

    snapshots: Mapped[list[SchemaSnapshot]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )


class SchemaSnapshot(Base):
    """Point-in-time capture of a project's tables, columns and indexes.

    Rows are only ever inserted. "Latest" is the newest by created_at.
    """

    __tablename__ = "schema_snapshots"

    snapshot_id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid4())
    )
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.project_id"), nullable=False)

    tables_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    columns_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    indexes_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    # Counts plus which introspection sources answered
    statistics: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)

    project: Mapped[Project] = relationship(back_populates="snapshots")


class Suggestion(Base):
    """An LLM-generated optimization suggestion.

    References tables and columns by name only, so a re-sync after a
    rename leaves it orphaned.
    """

    __tablename__ = "optimization_suggestions"

    suggestion_id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid4())
    )
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.project_id"), nullable=False)
    snapshot_id: Mapped[str | None] = mapped_column(ForeignKey("schema_snapshots.snapshot_id"))

    table_name: Mapped[str] = mapped_column(String, nullable=False)
    column_name: Mapped[str | None] = mapped_column(String)
    suggestion_type: Mapped[str] = mapped_column(String, nullable=False)

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String, nullable=False)  # critical, medium, low
    impact_score: Mapped[int | None] = mapped_column(Integer)
    sql_snippet: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    applied_at: Mapped[datetime | None] = mapped_column(DateTime)
    dismissed_at: Mapped[datetime | None] = mapped_column(DateTime)


class CodePattern(Base):
    """A place in application code that queries a table or column."""

    __tablename__ = "code_patterns"

    pattern_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.project_id"), nullable=False)

    table_name: Mapped[str] = mapped_column(String, nullable=False)
    column_name: Mapped[str | None] = mapped_column(String)
    pattern_type: Mapped[str] = mapped_column(String, nullable=False)  # query, join, filter, sort
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    line_number: Mapped[int | None] = mapped_column(Integer)
    code_snippet: Mapped[str | None] = mapped_column(Text)
    frequency: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)


class AnalysisJob(Base):
    """Record of an advice run or code scan (advice runs drive the cooldown)."""

    __tablename__ = "analysis_jobs"

    job_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.project_id"), nullable=False)
    job_type: Mapped[str] = mapped_column(String, nullable=False)  # 'ai_advice', 'code_scan'
    status: Mapped[str] = mapped_column(String, nullable=False, default="running")

    summary: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    error_message: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)


Index("idx_snapshots_project_created", SchemaSnapshot.project_id, SchemaSnapshot.created_at)
Index(
    "idx_suggestions_dedupe",
    Suggestion.project_id,
    Suggestion.table_name,
    Suggestion.column_name,
    Suggestion.suggestion_type,
)
Index("idx_code_patterns_project", CodePattern.project_id, CodePattern.table_name)
Index(
    "idx_analysis_jobs_cooldown",
    AnalysisJob.project_id,
    AnalysisJob.job_type,
    AnalysisJob.status,
)
