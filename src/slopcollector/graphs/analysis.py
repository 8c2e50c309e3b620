"""Per-column and per-table schema issue checks."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from slopcollector.graphs.config import GRAPH_CONFIG
from slopcollector.graphs.models import DiagramColumn, DiagramTable


def is_column_unused(column: DiagramColumn, now: datetime | None = None) -> bool:
    """Not accessed within the stale window (365 days). Unknown usage is not stale."""
    if column.last_used is None:
        return False
    now = now or datetime.now(UTC)
    last_used = column.last_used
    if last_used.tzinfo is None:
        last_used = last_used.replace(tzinfo=UTC)
    return last_used < now - timedelta(days=GRAPH_CONFIG.stale_column_days)


def needs_index(column: DiagramColumn) -> bool:
    """A foreign key column with no covering index."""
    return bool(column.foreign_key) and not column.indexed


def has_table_issues(table: DiagramTable, now: datetime | None = None) -> bool:
    return any(needs_index(c) or is_column_unused(c, now) for c in table.columns)
