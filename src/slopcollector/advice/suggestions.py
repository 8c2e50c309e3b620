"""Suggestion storage, status changes and dashboard mapping."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slopcollector.advice.models import (
    AdviceItem,
    AdviceSeverity,
    CodeReference,
    StoreResult,
    Suggestion,
    SuggestionDraft,
    SuggestionType,
)
from slopcollector.core.exceptions import PersistenceError, SuggestionNotFoundError
from slopcollector.core.logging import get_logger
from slopcollector.core.models import SuggestionAction, SuggestionStatus
from slopcollector.introspection.models import DatabaseSchemaSnapshot
from slopcollector.storage.models import CodePattern
from slopcollector.storage.models import Suggestion as SuggestionRow

logger = get_logger(__name__)

SEVERITY_TO_DB = {
    "error": "critical",
    "warning": "medium",
    "info": "low",
}

CATEGORY_TO_TYPE = {
    "missing_index": "missing_index",
    "composite_index": "composite_index",
    "unused_index": "unused_column",
    "slow_query": "slow_query",
    "unused_column": "unused_column",
    "rls_policy": "rls_policy",
    "foreign_key": "foreign_key",
    "data_type": "data_type_optimization",
    "normalization": "other",
}

IMPACT_SCORES = {
    "critical": 90,
    "high": 75,
    "medium": 50,
    "low": 25,
}
DEFAULT_IMPACT_SCORE = 50

CREATE_INDEX_RE = re.compile(
    r"CREATE\s+(?:UNIQUE\s+)?INDEX\s+(?:IF\s+NOT\s+EXISTS\s+)?(\w+)", re.IGNORECASE
)

_CLOSED_STATUSES = {SuggestionStatus.APPLIED.value, SuggestionStatus.DISMISSED.value}


def map_severity_to_db(severity: str) -> str:
    return SEVERITY_TO_DB.get(severity, "medium")


def map_category_to_type(category: str) -> str:
    return CATEGORY_TO_TYPE.get(category, "other")


def impact_score(severity: str) -> int:
    """Score a stored severity: critical 90, high 75, medium 50, low 25."""
    return IMPACT_SCORES.get(severity, DEFAULT_IMPACT_SCORE)


def draft_from_advice(item: AdviceItem) -> SuggestionDraft:
    return SuggestionDraft(
        table_name=item.table or "unknown",
        column_name=item.column or None,
        suggestion_type=map_category_to_type(item.category),
        title=item.headline,
        description=item.description,
        severity=map_severity_to_db(item.severity),
        sql_snippet=item.remediation or None,
    )


def is_index_already_present(
    remediation: str, snapshot: DatabaseSchemaSnapshot, table_name: str
) -> bool:
    """True when the remediation creates an index the snapshot already has on that table."""
    match = CREATE_INDEX_RE.search(remediation)
    if not match:
        return False
    index_name = match.group(1).lower()
    table = table_name.lower()
    return any(
        idx.index_name.lower() == index_name and idx.table_name.lower() == table
        for idx in snapshot.indexes
    )


def store_suggestions(
    session: Session,
    project_id: str,
    snapshot_id: str | None,
    drafts: Sequence[SuggestionDraft],
    snapshot: DatabaseSchemaSnapshot | None = None,
) -> StoreResult:
    """Persist drafts, deduplicating on table:column:type.

    - Drafts whose existing row is applied or dismissed are skipped.
    - Drafts whose CREATE INDEX already exists in the snapshot are
      skipped, and a pending row with the same key is marked applied.
    - A pending row with the same key is refreshed in place.
    - Anything else is inserted as pending.
    """
    rows = session.execute(
        select(SuggestionRow).where(SuggestionRow.project_id == project_id)
    ).scalars()
    existing: dict[str, SuggestionRow] = {}
    for row in rows:
        existing[f"{row.table_name}:{row.column_name or ''}:{row.suggestion_type}"] = row

    result = StoreResult()
    now = datetime.now(UTC)

    try:
        for draft in drafts:
            key = draft.dedupe_key
            current = existing.get(key)

            if current is not None and current.status in _CLOSED_STATUSES:
                result.skipped += 1
                continue

            if (
                snapshot is not None
                and draft.sql_snippet
                and is_index_already_present(draft.sql_snippet, snapshot, draft.table_name)
            ):
                if current is not None and current.status == SuggestionStatus.PENDING.value:
                    current.status = SuggestionStatus.APPLIED.value
                    current.applied_at = now
                    current.updated_at = now
                    result.applied_detected += 1
                result.skipped += 1
                continue

            if current is not None and current.status == SuggestionStatus.PENDING.value:
                current.snapshot_id = snapshot_id
                current.title = draft.title
                current.description = draft.description
                current.severity = draft.severity
                current.impact_score = impact_score(draft.severity)
                current.sql_snippet = draft.sql_snippet
                current.updated_at = now
                result.skipped += 1
                continue

            row = SuggestionRow(
                project_id=project_id,
                snapshot_id=snapshot_id,
                table_name=draft.table_name,
                column_name=draft.column_name,
                suggestion_type=draft.suggestion_type,
                title=draft.title,
                description=draft.description,
                severity=draft.severity,
                impact_score=impact_score(draft.severity),
                sql_snippet=draft.sql_snippet,
                status=SuggestionStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            existing[key] = row
            result.new += 1

        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to store suggestions: {e}") from e

    logger.info(
        "suggestions_stored",
        project_id=project_id,
        new=result.new,
        applied_detected=result.applied_detected,
        skipped=result.skipped,
    )
    return result


def update_suggestion_status(
    session: Session, suggestion_id: str, action: SuggestionAction | str
) -> SuggestionRow:
    """Apply a status action and stamp the relevant timestamps.

    Raises:
        ValueError: Unknown action
        SuggestionNotFoundError: No suggestion with that id
    """
    action = SuggestionAction(action)

    row = session.get(SuggestionRow, suggestion_id)
    if row is None:
        raise SuggestionNotFoundError(suggestion_id)

    now = datetime.now(UTC)
    if action is SuggestionAction.APPLY:
        row.status = SuggestionStatus.APPLIED.value
        row.applied_at = now
        row.dismissed_at = None
    elif action is SuggestionAction.DISMISS:
        row.status = SuggestionStatus.DISMISSED.value
        row.dismissed_at = now
        row.applied_at = None
    elif action is SuggestionAction.REOPEN:
        row.status = SuggestionStatus.PENDING.value
        row.applied_at = None
        row.dismissed_at = None
    else:
        row.status = SuggestionStatus.ARCHIVED.value
    row.updated_at = now

    try:
        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to update suggestion {suggestion_id}: {e}") from e

    logger.info("suggestion_status_updated", suggestion_id=suggestion_id, status=row.status)
    return row


def _ui_severity(severity: str) -> AdviceSeverity:
    if severity in ("critical", "error"):
        return "error"
    if severity in ("warning", "medium"):
        return "warning"
    return "info"


def _ui_type(suggestion_type: str) -> SuggestionType:
    value = suggestion_type.lower()
    if "index" in value:
        return "not-indexed"
    if "unused" in value or "stale" in value:
        return "unused"
    if "duplicat" in value:
        return "duplicate"
    return "optimization"


def _code_references(
    row: SuggestionRow, patterns: Sequence[CodePattern]
) -> list[CodeReference] | None:
    # Column-specific patterns first, then table-wide ones
    column_refs = []
    table_refs = []
    for pattern in patterns:
        if pattern.table_name != row.table_name:
            continue
        if pattern.column_name is None:
            table_refs.append(pattern)
        elif row.column_name and pattern.column_name == row.column_name:
            column_refs.append(pattern)

    refs = [
        CodeReference(
            file_path=p.file_path,
            line_number=p.line_number,
            pattern_type=p.pattern_type,
            frequency=p.frequency or 1,
        )
        for p in column_refs + table_refs
    ]
    return refs or None


def to_ui_suggestion(row: SuggestionRow, patterns: Sequence[CodePattern] = ()) -> Suggestion:
    score = row.impact_score
    return Suggestion(
        id=row.suggestion_id,
        table_id=row.table_name,
        table_name=row.table_name,
        column_name=row.column_name,
        severity=_ui_severity(row.severity),
        type=_ui_type(row.suggestion_type),
        title=row.title,
        description=row.description,
        impact=str(score) if score is not None else None,
        code_references=_code_references(row, patterns),
        status=row.status,
        applied_at=row.applied_at,
        dismissed_at=row.dismissed_at,
    )


def list_code_patterns(session: Session, project_id: str) -> list[CodePattern]:
    stmt = (
        select(CodePattern)
        .where(CodePattern.project_id == project_id)
        .order_by(CodePattern.table_name, CodePattern.file_path, CodePattern.line_number)
    )
    return list(session.execute(stmt).scalars().all())


def list_suggestions(
    session: Session,
    project_id: str,
    status: str | None = None,
    include_archived: bool = False,
) -> list[Suggestion]:
    """Dashboard suggestions for a project, highest impact first."""
    stmt = select(SuggestionRow).where(SuggestionRow.project_id == project_id)
    if status is not None:
        stmt = stmt.where(SuggestionRow.status == status)
    elif not include_archived:
        stmt = stmt.where(SuggestionRow.status != SuggestionStatus.ARCHIVED.value)
    stmt = stmt.order_by(SuggestionRow.impact_score.desc(), SuggestionRow.created_at.desc())

    patterns = list_code_patterns(session, project_id)
    return [to_ui_suggestion(row, patterns) for row in session.execute(stmt).scalars()]
