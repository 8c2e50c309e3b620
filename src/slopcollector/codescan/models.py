"""Code scan models: files read, patterns found, and the run summary."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from slopcollector.advice.models import CamelModel, PatternType


@dataclass(frozen=True)
class SourceFile:
    """One application file; `path` is relative to the scanned root."""

    path: str
    content: str


class ExtractedPattern(BaseModel):
    """A table or column use found in application code."""

    table_name: str
    column_name: str | None = None
    pattern_type: PatternType
    file_path: str
    line_number: int | None = None
    code_snippet: str = ""
    frequency: int = 1

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self.table_name, self.column_name or "*", self.pattern_type, self.file_path)


class PatternSummary(CamelModel):
    total_patterns: int = 0
    filter_count: int = 0
    join_count: int = 0
    sort_count: int = 0


class CodeScanResult(CamelModel):
    """Outcome of one scan, as the API and `--json` report it."""

    project_id: str
    job_id: str | None = None
    source: str
    files_scanned: int = 0
    patterns_found: int = 0
    tables_analyzed: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    summary: PatternSummary = Field(default_factory=PatternSummary)
