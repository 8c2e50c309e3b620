"""Privileged catalog reads through the SQL RPC function.

Each reader returns an empty list when the RPC is missing or the key
lacks privilege; the OpenAPI-only path still works without them.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from slopcollector.core.logging import get_logger
from slopcollector.introspection.models import ForeignKeyConstraint, IndexSchema, TableStats

if TYPE_CHECKING:
    from slopcollector.introspection.client import SupabaseRestClient

logger = get_logger(__name__)

_SCHEMA_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FOREIGN_KEYS_SQL = """
SELECT
    tc.table_name,
    kcu.column_name,
    ccu.table_name AS foreign_table_name,
    ccu.column_name AS foreign_column_name,
    tc.constraint_name
FROM information_schema.table_constraints AS tc
JOIN information_schema.key_column_usage AS kcu
    ON tc.constraint_name = kcu.constraint_name
    AND tc.table_schema = kcu.table_schema
JOIN information_schema.constraint_column_usage AS ccu
    ON ccu.constraint_name = tc.constraint_name
WHERE tc.constraint_type = 'FOREIGN KEY'
    AND tc.table_schema = '{schema}'
ORDER BY tc.table_name, kcu.ordinal_position
"""

INDEXES_SQL = """
SELECT
    schemaname AS schema,
    tablename AS table_name,
    indexname AS index_name,
    indexdef AS index_def
FROM pg_catalog.pg_indexes
WHERE schemaname = '{schema}'
ORDER BY tablename, indexname
"""

TABLE_STATS_SQL = """
SELECT
    c.relname AS table_name,
    c.reltuples::bigint AS row_estimate,
    obj_description(c.oid, 'pg_class') AS description
FROM pg_catalog.pg_class c
JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = '{schema}'
    AND c.relkind IN ('r', 'p')
ORDER BY c.relname
"""


def is_valid_schema_name(schema: str) -> bool:
    """Schema names are interpolated into SQL text; only plain identifiers pass."""
    return bool(_SCHEMA_NAME.match(schema))


def _run_catalog_query(
    client: SupabaseRestClient, sql: str, schema: str, what: str
) -> list[dict[str, Any]]:
    if not is_valid_schema_name(schema):
        logger.warning("catalog_schema_name_rejected", schema=schema, query=what)
        return []
    result = client.run_sql(sql.format(schema=schema))
    if not result.success:
        logger.info("catalog_query_skipped", query=what, reason=result.error)
        return []
    return result.unwrap()


def extract_index_columns(index_def: str | None) -> list[str]:
    """Column names from the first parenthesised list of a CREATE INDEX statement.

    >>> extract_index_columns('CREATE INDEX ix ON public.posts USING btree ("user_id", created_at)')
    ['user_id', 'created_at']
    """
    if not index_def:
        return []
    match = re.search(r"\(([^)]+)\)", index_def)
    if not match:
        return []
    columns = []
    for part in match.group(1).split(","):
        name = part.strip().replace('"', "")
        if name:
            columns.append(name)
    return columns


def _is_primary_index(index_name: str, index_def: str) -> bool:
    # pg_indexes never says PRIMARY KEY; Postgres names PK indexes <table>_pkey
    return "PRIMARY KEY" in index_def or index_name.endswith("_pkey")


def _row_estimate(value: Any) -> int | None:
    """reltuples as an int; -1 (never analyzed) and missing values become None."""
    if value is None:
        return None
    estimate = int(float(value))
    return estimate if estimate >= 0 else None


def fetch_foreign_keys(
    client: SupabaseRestClient, schema: str = "public"
) -> list[ForeignKeyConstraint]:
    """Real FK constraints from information_schema."""
    constraints = []
    for row in _run_catalog_query(client, FOREIGN_KEYS_SQL, schema, "foreign_keys"):
        try:
            constraints.append(
                ForeignKeyConstraint(
                    name=row.get("constraint_name"),
                    source_table=row["table_name"],
                    source_column=row["column_name"],
                    target_table=row["foreign_table_name"],
                    target_column=row["foreign_column_name"],
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("catalog_foreign_key_row_invalid", row=row, error=str(e))
    return constraints


def fetch_indexes(client: SupabaseRestClient, schema: str = "public") -> list[IndexSchema]:
    """Indexes from pg_catalog.pg_indexes."""
    indexes = []
    for row in _run_catalog_query(client, INDEXES_SQL, schema, "indexes"):
        index_name = row.get("index_name")
        table_name = row.get("table_name")
        if not index_name or not table_name:
            continue
        try:
            index_def = str(row.get("index_def") or "")
            indexes.append(
                IndexSchema(
                    schema=row.get("schema") or schema,
                    table_name=table_name,
                    index_name=index_name,
                    is_unique="UNIQUE" in index_def,
                    is_primary=_is_primary_index(str(index_name), index_def),
                    columns=extract_index_columns(index_def),
                )
            )
        except (TypeError, ValueError) as e:
            logger.warning("catalog_index_row_invalid", row=row, error=str(e))
    return indexes


def fetch_table_stats(client: SupabaseRestClient, schema: str = "public") -> list[TableStats]:
    """Row estimates and table comments from pg_class."""
    stats = []
    for row in _run_catalog_query(client, TABLE_STATS_SQL, schema, "table_stats"):
        table_name = row.get("table_name")
        if not table_name:
            continue
        try:
            stats.append(
                TableStats(
                    table_name=table_name,
                    row_estimate=_row_estimate(row.get("row_estimate")),
                    description=row.get("description"),
                )
            )
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("catalog_stats_row_invalid", row=row, error=str(e))
    return stats
