"""Schema introspection: tables, columns, FKs and indexes in one snapshot.

The OpenAPI document and the optional catalog reads are independent
network calls, so they are fanned out on a thread pool and joined
before mapping.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from slopcollector.core.logging import get_logger
from slopcollector.introspection import catalog
from slopcollector.introspection.client import SupabaseRestClient
from slopcollector.introspection.foreign_keys import create_resolver, parse_openapi_hints
from slopcollector.introspection.models import (
    DatabaseSchemaSnapshot,
    ForeignKeyConstraint,
    IndexSchema,
    TableSchema,
    TableStats,
)
from slopcollector.introspection.tables import extract_table_names
from slopcollector.introspection.types import map_columns
from slopcollector.snapshots.assembler import assemble_snapshot

logger = get_logger(__name__)


@dataclass
class IntrospectionReport:
    """What each source contributed to a snapshot."""

    openapi_ok: bool = False
    catalog_foreign_keys: int = 0
    hinted_foreign_keys: int = 0
    catalog_indexes: int = 0
    catalog_table_stats: int = 0
    resolved_foreign_keys: int = 0
    duration_seconds: float = 0.0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "openapi_ok": self.openapi_ok,
            "catalog_foreign_keys": self.catalog_foreign_keys,
            "hinted_foreign_keys": self.hinted_foreign_keys,
            "catalog_indexes": self.catalog_indexes,
            "catalog_table_stats": self.catalog_table_stats,
            "resolved_foreign_keys": self.resolved_foreign_keys,
            "duration_seconds": round(self.duration_seconds, 3),
            "warnings": list(self.warnings),
        }


class SchemaIntrospector:
    """Builds a DatabaseSchemaSnapshot for one PostgREST endpoint.

    Never raises for upstream problems: an unreachable endpoint gives an
    empty snapshot, a missing SQL RPC gives a snapshot without indexes
    and with heuristic-only FKs.

    Args:
        client: REST client for the project
        schema: Target schema name
        max_workers: Thread pool size for the concurrent fetches
        use_catalog: Set False to skip the privileged catalog reads
    """

    def __init__(
        self,
        client: SupabaseRestClient,
        schema: str = "public",
        max_workers: int = 4,
        use_catalog: bool = True,
    ):
        self.client = client
        self.schema = schema
        self.max_workers = max_workers
        self.use_catalog = use_catalog
        self.last_report = IntrospectionReport()

    def introspect(self) -> DatabaseSchemaSnapshot:
        """Fetch everything and assemble the snapshot."""
        start = time.perf_counter()
        report = IntrospectionReport()

        document, constraints, indexes, stats = self._fetch_all()
        report.openapi_ok = document is not None
        report.catalog_foreign_keys = len(constraints)
        report.catalog_indexes = len(indexes)
        report.catalog_table_stats = len(stats)

        if document is None:
            report.warnings.append("OpenAPI document unavailable")
            document = {}

        table_names = extract_table_names(document)
        definitions = document.get("definitions")
        if not isinstance(definitions, dict):
            definitions = {}

        hinted_fks, hinted_pks = parse_openapi_hints(definitions)
        report.hinted_foreign_keys = len(hinted_fks)

        # Catalog constraints first so they win over hints for the same column
        resolver = create_resolver(table_names, [*constraints, *hinted_fks])
        primary_keys = _merge_primary_keys(hinted_pks, indexes)

        stats_by_table = {s.table_name: s for s in stats}
        tables = [
            TableSchema(
                schema=self.schema,
                table_name=name,
                row_estimate=stats_by_table[name].row_estimate if name in stats_by_table else None,
                description=_table_description(name, definitions, stats_by_table),
            )
            for name in table_names
        ]

        columns = map_columns(
            table_names,
            definitions,
            resolver=resolver,
            primary_keys=primary_keys,
            schema=self.schema,
        )
        report.resolved_foreign_keys = sum(1 for c in columns if c.foreign_key_to)

        known = set(table_names)
        snapshot = assemble_snapshot(
            tables,
            columns,
            [i for i in indexes if i.table_name in known],
        )

        report.duration_seconds = time.perf_counter() - start
        self.last_report = report
        logger.info(
            "introspection_complete",
            tables=len(snapshot.tables),
            columns=len(snapshot.columns),
            indexes=len(snapshot.indexes),
            foreign_keys=report.resolved_foreign_keys,
            duration_seconds=round(report.duration_seconds, 3),
        )
        return snapshot

    def _fetch_all(
        self,
    ) -> tuple[
        dict[str, Any] | None,
        list[ForeignKeyConstraint],
        list[IndexSchema],
        list[TableStats],
    ]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            document_future = executor.submit(self.client.fetch_openapi)
            if self.use_catalog:
                fk_future = executor.submit(catalog.fetch_foreign_keys, self.client, self.schema)
                index_future = executor.submit(catalog.fetch_indexes, self.client, self.schema)
                stats_future = executor.submit(
                    catalog.fetch_table_stats, self.client, self.schema
                )

            document = document_future.result().value_or(None)

            if not self.use_catalog:
                return document, [], [], []
            return document, fk_future.result(), index_future.result(), stats_future.result()


def _merge_primary_keys(
    hinted: dict[str, set[str]], indexes: list[IndexSchema]
) -> dict[str, set[str]]:
    """Authoritative PK columns per table: PostgREST <pk/> notes plus primary indexes."""
    merged = {table: set(cols) for table, cols in hinted.items()}
    for index in indexes:
        if index.is_primary and index.columns:
            merged.setdefault(index.table_name, set()).update(index.columns)
    return merged


def _table_description(
    name: str, definitions: dict[str, Any], stats_by_table: dict[str, TableStats]
) -> str | None:
    if name in stats_by_table and stats_by_table[name].description:
        return stats_by_table[name].description
    definition = definitions.get(name)
    if isinstance(definition, dict):
        description = definition.get("description")
        if isinstance(description, str) and description:
            return description
    return None
