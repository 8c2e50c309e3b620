"""LLM advice generation from a schema snapshot."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from slopcollector.advice.models import AdviceItem, AdviceStats, GeneratedAdvice
from slopcollector.core.exceptions import AdviceGenerationError
from slopcollector.core.logging import get_logger
from slopcollector.graphs.tables import normalize_index_column
from slopcollector.introspection.models import DatabaseSchemaSnapshot
from slopcollector.llm.config import LLMLimits
from slopcollector.llm.feature import LLMFeature
from slopcollector.storage.models import CodePattern

logger = get_logger(__name__)

FEATURE_NAME = "schema_advice"
DEFAULT_PROJECT_NAME = "Supabase Project"


def summarize_snapshot(
    snapshot: DatabaseSchemaSnapshot, limits: LLMLimits | None = None
) -> dict[str, Any]:
    """Compact per-table view of a snapshot for the prompt.

    Each table carries its columns (with PK, FK and indexed flags), its
    indexes and its outgoing foreign keys.
    """
    limits = limits or LLMLimits()

    foreign_keys = []
    for column in snapshot.columns:
        if column.foreign_key_to:
            target_table, _, target_column = column.foreign_key_to.partition(".")
            foreign_keys.append(
                {
                    "sourceTable": column.table_name,
                    "sourceColumn": column.column_name,
                    "targetTable": target_table,
                    "targetColumn": target_column,
                }
            )

    tables = []
    for table in snapshot.tables[: limits.max_tables_in_prompt]:
        indexes = [i for i in snapshot.indexes_for(table.table_name) if i.schema_ == table.schema_]
        indexed = {normalize_index_column(c) for i in indexes for c in i.columns}
        columns = [c for c in snapshot.columns_for(table.table_name) if c.schema_ == table.schema_]
        table_fks = [fk for fk in foreign_keys if fk["sourceTable"] == table.table_name]

        tables.append(
            {
                "schema": table.schema_,
                "table": table.table_name,
                "rowEstimate": table.row_estimate,
                "columns": [
                    {
                        "column": c.column_name,
                        "type": c.data_type,
                        "nullable": c.is_nullable,
                        "default": c.column_default,
                        "isPrimaryKey": bool(c.is_primary_key),
                        "foreignKeyTo": c.foreign_key_to,
                        "indexed": c.column_name in indexed,
                    }
                    for c in columns[: limits.max_columns_per_table]
                ],
                "indexes": [
                    {
                        "name": i.index_name,
                        "unique": i.is_unique,
                        "primary": i.is_primary,
                        "columns": i.columns,
                    }
                    for i in indexes
                ],
                "foreignKeys": table_fks,
                "hasForeignKeys": bool(table_fks),
            }
        )

    return {
        "tableCount": len(snapshot.tables),
        "indexCount": len(snapshot.indexes),
        "foreignKeyCount": len(foreign_keys),
        "foreignKeys": foreign_keys,
        "tables": tables,
    }


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _salvage(data: Any) -> GeneratedAdvice:
    """Keep whatever advisories name a table and a headline."""
    if not isinstance(data, dict):
        return GeneratedAdvice(summary="Schema analysis completed")

    raw_items = data.get("advisories")
    items = []
    for raw in raw_items if isinstance(raw_items, list) else []:
        if not isinstance(raw, dict) or not raw.get("table") or not raw.get("headline"):
            continue
        items.append(
            AdviceItem.model_construct(
                severity=str(raw.get("severity") or "warning"),
                category=str(raw.get("category") or "other"),
                table=str(raw["table"]),
                column=raw.get("column") or None,
                headline=str(raw["headline"]),
                description=str(raw.get("description") or ""),
                remediation=raw.get("remediation") or None,
                estimated_impact=raw.get("estimatedImpact"),
                affected_queries=raw.get("affectedQueries"),
            )
        )

    stats = None
    if isinstance(data.get("stats"), dict):
        try:
            stats = AdviceStats.model_validate(data["stats"])
        except ValidationError:
            stats = None

    summary = data.get("summary")
    return GeneratedAdvice.model_construct(
        summary=summary if isinstance(summary, str) and summary else "Schema analysis completed",
        advisories=items,
        stats=stats,
    )


def parse_advice(content: str) -> GeneratedAdvice:
    """Parse model output into GeneratedAdvice, salvaging partial results.

    Raises:
        AdviceGenerationError: The output is not JSON
    """
    try:
        data = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise AdviceGenerationError(f"Failed to parse advice JSON: {e}") from e

    try:
        return GeneratedAdvice.model_validate(data)
    except ValidationError as e:
        logger.warning("advice_validation_failed", errors=e.error_count())
        return _salvage(data)


class AdviceGenerator(LLMFeature):
    """Renders the schema_advice prompt and parses the reply."""

    def generate(
        self,
        snapshot: DatabaseSchemaSnapshot,
        project_name: str | None = None,
        code_patterns: Sequence[CodePattern] | None = None,
    ) -> GeneratedAdvice:
        """Ask the model for optimization advice.

        Raises:
            AdviceGenerationError: Feature disabled, provider failure or unparseable output
        """
        feature = self.config.features.schema_advice
        if not feature.enabled:
            raise AdviceGenerationError("Schema advice is disabled in llm.yaml")

        summary = summarize_snapshot(snapshot, self.config.limits)
        patterns = [
            {
                "tableName": p.table_name,
                "columnName": p.column_name,
                "patternType": p.pattern_type,
                "filePath": p.file_path,
                "lineNumber": p.line_number,
                "frequency": p.frequency,
            }
            for p in code_patterns or ()
        ]

        system, prompt, temperature = self.renderer.render_split(
            feature.prompt_file or FEATURE_NAME,
            {
                "project_name": project_name or DEFAULT_PROJECT_NAME,
                "schema_json": json.dumps(summary, indent=2),
                "table_count": summary["tableCount"],
                "index_count": summary["indexCount"],
                "foreign_key_count": summary["foreignKeyCount"],
                "code_patterns_json": json.dumps(patterns, indent=2),
            },
        )

        result = self._call_llm(FEATURE_NAME, system, prompt, temperature, feature.model_tier)
        if not result.success or result.value is None:
            raise AdviceGenerationError(result.error or "LLM call failed")

        advice = parse_advice(result.value.content)
        logger.info("advice_generated", advisories=len(advice.advisories))
        return advice
