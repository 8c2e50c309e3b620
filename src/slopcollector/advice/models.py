"""Advice and suggestion models.

LLM output (`GeneratedAdvice`), the drafts stored from it, and the
`Suggestion` shape served to the dashboard (camelCase on the wire).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AdviceSeverity = Literal["error", "warning", "info"]
AdviceCategory = Literal[
    "missing_index",
    "composite_index",
    "unused_index",
    "slow_query",
    "unused_column",
    "rls_policy",
    "foreign_key",
    "data_type",
    "normalization",
]
SuggestionType = Literal["unused", "not-indexed", "duplicate", "optimization"]
PatternType = Literal["query", "join", "filter", "sort"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# === LLM output ===


class AdviceItem(CamelModel):
    """One advisory as returned by the model."""

    severity: AdviceSeverity
    category: AdviceCategory
    table: str
    column: str | None = None
    headline: str = Field(min_length=10, max_length=100)
    description: str = Field(min_length=20, max_length=500)
    remediation: str | None = None
    """SQL that fixes the issue."""
    estimated_impact: Literal["high", "medium", "low"] | None = None
    affected_queries: list[str] | None = None


class AdviceStats(CamelModel):
    total_issues: int = Field(default=0, ge=0)
    critical_issues: int = Field(default=0, ge=0)
    warning_issues: int = Field(default=0, ge=0)
    info_issues: int = Field(default=0, ge=0)


class GeneratedAdvice(CamelModel):
    summary: str
    advisories: list[AdviceItem] = Field(default_factory=list, max_length=50)
    stats: AdviceStats | None = None


# === Storage ===


class SuggestionDraft(BaseModel):
    """An advisory mapped to storage vocabulary, before dedupe."""

    table_name: str
    column_name: str | None = None
    suggestion_type: str
    title: str
    description: str
    severity: str  # critical, medium, low
    sql_snippet: str | None = None

    @property
    def dedupe_key(self) -> str:
        return f"{self.table_name}:{self.column_name or ''}:{self.suggestion_type}"


class StoreResult(BaseModel):
    new: int = 0
    applied_detected: int = 0
    skipped: int = 0


class AdviceRunResult(BaseModel):
    """Outcome of one advice run for a project."""

    project_id: str
    snapshot_id: str
    job_id: str
    summary: str
    stored: StoreResult
    stats: AdviceStats | None = None


# === Dashboard ===


class CodeReference(CamelModel):
    file_path: str
    line_number: int | None = None
    pattern_type: PatternType
    frequency: int = 1


class Suggestion(CamelModel):
    """A suggestion as the dashboard renders it."""

    id: str
    table_id: str
    table_name: str
    column_name: str | None = None
    severity: AdviceSeverity
    type: SuggestionType
    title: str
    description: str
    impact: str | None = None
    code_references: list[CodeReference] | None = None
    status: str | None = None
    applied_at: datetime | None = None
    dismissed_at: datetime | None = None
