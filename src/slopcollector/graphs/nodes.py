"""Diagram nodes: one per table."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from slopcollector.graphs.analysis import has_table_issues
from slopcollector.graphs.models import DiagramNode, DiagramTable, SelectCallback, TableNodeData

if TYPE_CHECKING:
    from slopcollector.advice.models import Suggestion


def generate_nodes(
    tables: Sequence[DiagramTable],
    suggestions: Sequence[Suggestion] = (),
    selected_table: str | None = None,
    on_select: SelectCallback | None = None,
) -> list[DiagramNode]:
    """Convert tables to React Flow nodes.

    Args:
        tables: Tables with their columns
        suggestions: AI suggestions; a table with any gets hasAIIssues
        selected_table: Currently selected table id
        on_select: Selection callback, carried in node data but never serialized

    Returns:
        Nodes in table order, positioned at each table's stored position
    """
    flagged = {s.table_id for s in suggestions}
    return [
        DiagramNode(
            id=table.id,
            position=table.position,
            data=TableNodeData(
                table=table,
                is_selected=selected_table == table.id,
                on_select=on_select,
                has_ai_issues=table.id in flagged,
                has_schema_issues=has_table_issues(table),
            ),
        )
        for table in tables
    ]
