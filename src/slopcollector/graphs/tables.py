"""Snapshot to diagram tables."""

from __future__ import annotations

from slopcollector.graphs.models import DiagramColumn, DiagramTable
from slopcollector.introspection.models import DatabaseSchemaSnapshot


def normalize_index_column(raw: str) -> str:
    # `"created_at" DESC` -> created_at
    parts = raw.replace('"', "").split()
    return parts[0] if parts else ""


def snapshot_to_tables(snapshot: DatabaseSchemaSnapshot) -> list[DiagramTable]:
    """One DiagramTable per snapshot table, in snapshot order.

    A column counts as indexed when it appears in any index of its table.
    """
    indexed: dict[str, set[str]] = {}
    for index in snapshot.indexes:
        key = f"{index.schema_}.{index.table_name}"
        bucket = indexed.setdefault(key, set())
        for raw in index.columns:
            name = normalize_index_column(raw)
            if name:
                bucket.add(name)

    columns_by_table: dict[str, list[DiagramColumn]] = {}
    for column in snapshot.columns:
        key = f"{column.schema_}.{column.table_name}"
        columns_by_table.setdefault(key, []).append(
            DiagramColumn(
                name=column.column_name,
                type=column.data_type,
                nullable=column.is_nullable,
                indexed=column.column_name in indexed.get(key, set()),
                primary_key=bool(column.is_primary_key),
                foreign_key=column.foreign_key_to,
            )
        )

    tables = []
    for table in snapshot.tables:
        columns = columns_by_table.get(f"{table.schema_}.{table.table_name}", [])
        tables.append(
            DiagramTable(
                id=table.table_name,
                name=table.table_name,
                columns=columns,
                row_count=table.row_estimate,
                column_count=len(columns),
            )
        )
    return tables
