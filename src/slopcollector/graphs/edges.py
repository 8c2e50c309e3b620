"""Diagram edges: one per resolved foreign key column."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from slopcollector.core.logging import get_logger
from slopcollector.graphs.analysis import needs_index
from slopcollector.graphs.config import GRAPH_CONFIG
from slopcollector.graphs.models import (
    DiagramEdge,
    DiagramTable,
    EdgeMarker,
    EdgeStyle,
    LayoutDirection,
    LabelBackgroundStyle,
    LabelStyle,
    Position,
    SourceHandle,
    TargetHandle,
)
from slopcollector.introspection.pluralize import match_table

if TYPE_CHECKING:
    from slopcollector.graphs.cache import GraphCache

logger = get_logger(__name__)

DEFAULT_HANDLES: tuple[SourceHandle, TargetHandle] = ("bottom", "top-target")


def calculate_handle_positions(
    source: Position, target: Position
) -> tuple[SourceHandle, TargetHandle]:
    """Pick the node sides an edge should leave from and arrive at.

    The dominant axis of the offset decides horizontal vs vertical;
    its sign picks the near side.
    """
    dx = target.x - source.x
    dy = target.y - source.y

    if abs(dx) > abs(dy):
        if dx > 0:
            return "right", "left-target"
        return "left", "right-target"

    if dy > 0:
        return "bottom", "top-target"
    return "top", "bottom-target"


def build_table_lookup(
    tables: Sequence[DiagramTable],
    cache: GraphCache | None = None,
    scope: str = "",
) -> dict[str, str]:
    """Lowercased table id and name to table id."""
    cache_key = f"{scope}table-lookup-{len(tables)}"
    if cache is not None:
        cached = cache.get_table_lookup(cache_key)
        if cached is not None:
            return cached

    lookup: dict[str, str] = {}
    for table in tables:
        lookup[table.id.lower()] = table.id
        lookup[table.name.lower()] = table.id

    if cache is not None:
        cache.set_table_lookup(cache_key, lookup)
    return lookup


def _build_edge(
    table: DiagramTable,
    column_name: str,
    target_id: str,
    missing_index: bool,
    handles: tuple[SourceHandle, TargetHandle],
) -> DiagramEdge:
    colors = GRAPH_CONFIG.edge_colors
    color = colors.missing_index if missing_index else colors.normal
    return DiagramEdge(
        id=f"{table.id}-{column_name}-{target_id}",
        source=table.id,
        target=target_id,
        source_handle=handles[0],
        target_handle=handles[1],
        animated=missing_index,
        style=EdgeStyle(
            stroke=color,
            stroke_width=2,
            stroke_dasharray="5,5" if missing_index else None,
        ),
        label=column_name,
        label_style=LabelStyle(fill=colors.label),
        label_bg_style=LabelBackgroundStyle(fill=colors.label_background),
        marker_end=EdgeMarker(color=color),
    )


def generate_edges(
    tables: Sequence[DiagramTable],
    node_positions: Mapping[str, Position] | None = None,
    cache: GraphCache | None = None,
    scope: str = "",
    direction: LayoutDirection = "TB",
) -> list[DiagramEdge]:
    """Convert foreign keys to React Flow edges.

    Args:
        tables: Tables with their columns
        node_positions: Node centers; when given, handles face each other
        cache: Optional memo for edges and the table lookup
        scope: Cache key prefix (e.g. a project id)
        direction: Layout the positions came from; part of the cache key

    Returns:
        One edge per column with a resolvable foreign key. Edges to
        tables outside `tables` are dropped with a warning.
    """
    variant = f"positioned-{direction}" if node_positions else "base"
    cache_key = f"{scope}edges-{len(tables)}-{variant}"
    if cache is not None:
        cached = cache.get_edges(cache_key)
        if cached is not None:
            return cached

    lookup = build_table_lookup(tables, cache, scope)
    edges: list[DiagramEdge] = []

    for table in tables:
        for column in table.columns:
            if not column.foreign_key:
                continue

            target_name = column.foreign_key.split(".")[0]
            if not target_name:
                logger.warning(
                    "fk_reference_invalid",
                    table=table.name,
                    column=column.name,
                    foreign_key=column.foreign_key,
                )
                continue

            target_id = match_table(target_name, lookup)
            if target_id is None:
                logger.warning(
                    "fk_reference_to_missing_table",
                    table=table.name,
                    column=column.name,
                    target=target_name,
                )
                continue

            handles = DEFAULT_HANDLES
            if node_positions:
                source_pos = node_positions.get(table.id)
                target_pos = node_positions.get(target_id)
                if source_pos is not None and target_pos is not None:
                    handles = calculate_handle_positions(source_pos, target_pos)

            edges.append(_build_edge(table, column.name, target_id, needs_index(column), handles))

    logger.debug("edges_generated", tables=len(tables), edges=len(edges))

    if cache is not None:
        cache.set_edges(cache_key, edges)
    return edges
