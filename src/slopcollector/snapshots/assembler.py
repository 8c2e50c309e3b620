"""Snapshot assembly and (de)serialization to persisted rows."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from slopcollector.introspection.models import (
    ColumnSchema,
    DatabaseSchemaSnapshot,
    IndexSchema,
    TableSchema,
)

if TYPE_CHECKING:
    from slopcollector.storage.models import SchemaSnapshot


def assemble_snapshot(
    tables: Sequence[TableSchema],
    columns: Sequence[ColumnSchema],
    indexes: Sequence[IndexSchema] = (),
) -> DatabaseSchemaSnapshot:
    """Combine lister, mapper and index outputs into one snapshot.

    No merging with earlier snapshots: each sync is a full capture.
    """
    return DatabaseSchemaSnapshot(
        tables=list(tables),
        columns=list(columns),
        indexes=list(indexes),
    )


def snapshot_to_row_data(snapshot: DatabaseSchemaSnapshot) -> dict[str, list[dict[str, Any]]]:
    """JSON column payloads for a SchemaSnapshot row."""
    return {
        "tables_data": [t.to_wire() for t in snapshot.tables],
        "columns_data": [c.to_wire() for c in snapshot.columns],
        "indexes_data": [i.to_wire() for i in snapshot.indexes],
    }


def snapshot_from_row(row: SchemaSnapshot) -> DatabaseSchemaSnapshot:
    """Rebuild the snapshot model from a persisted row."""
    return DatabaseSchemaSnapshot(
        tables=[TableSchema.model_validate(t) for t in row.tables_data or []],
        columns=[ColumnSchema.model_validate(c) for c in row.columns_data or []],
        indexes=[IndexSchema.model_validate(i) for i in row.indexes_data or []],
    )
