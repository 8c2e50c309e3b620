"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from slopcollector.core.models import SuggestionAction

# --- Project schemas ---


class ProjectCreate(BaseModel):
    """Schema for connecting a project."""

    name: str = Field(min_length=1)
    supabase_url: str = Field(description="Project base URL, e.g. https://xyz.supabase.co")
    api_key: str = Field(min_length=1, description="Anon or service role key")
    schema_name: str = "public"


class ProjectResponse(BaseModel):
    """Schema for project response. The API key is never returned."""

    model_config = ConfigDict(from_attributes=True)

    project_id: str
    name: str
    supabase_url: str
    schema_name: str
    created_at: datetime
    last_synced_at: datetime | None = None


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int


# --- Sync and snapshot schemas ---


class SyncResponse(BaseModel):
    """Result of a sync."""

    project_id: str
    snapshot_id: str | None = None
    synced: bool
    table_count: int = 0
    column_count: int = 0
    index_count: int = 0
    foreign_key_count: int = 0
    message: str


class SnapshotSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    snapshot_id: str
    project_id: str
    created_at: datetime
    statistics: dict[str, Any] | None = None


class SnapshotListResponse(BaseModel):
    snapshots: list[SnapshotSummary]
    total: int


class SnapshotResponse(SnapshotSummary):
    """A snapshot with its tables, columns and indexes in wire format."""

    snapshot: dict[str, Any]


# --- Diagram schemas ---


class RelayoutResponse(BaseModel):
    project_id: str
    layout_version: int


# --- Advice schemas ---


class AdviceRequest(BaseModel):
    skip_cooldown: bool = False
    include_code_patterns: bool = True
    cooldown_hours: float | None = Field(default=None, ge=0)


class SuggestionStatusUpdate(BaseModel):
    action: SuggestionAction


# --- Code scan schemas ---


class CodeScanRequest(BaseModel):
    """Code to scan: uploaded files or a GitHub repository, not both."""

    files: dict[str, str] | None = Field(
        default=None, description="Uploaded files as {relative path: content}"
    )
    repo_url: str | None = None
    branch: str = "main"

    @model_validator(mode="after")
    def _one_source(self) -> CodeScanRequest:
        if (self.files is None) == (self.repo_url is None):
            raise ValueError("Provide either files or repo_url")
        return self


class CodePatternResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pattern_id: str
    table_name: str
    column_name: str | None = None
    pattern_type: str
    file_path: str
    line_number: int | None = None
    code_snippet: str | None = None
    frequency: int
