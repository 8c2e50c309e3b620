"""Schema diagram generation: nodes, edges, layout and caching."""

from slopcollector.graphs.builder import DiagramBuilder
from slopcollector.graphs.cache import GraphCache
from slopcollector.graphs.edges import calculate_handle_positions, generate_edges
from slopcollector.graphs.layout import compute_layout
from slopcollector.graphs.models import (
    DiagramColumn,
    DiagramEdge,
    DiagramNode,
    DiagramTable,
    LayoutResult,
    Position,
)
from slopcollector.graphs.nodes import generate_nodes
from slopcollector.graphs.tables import snapshot_to_tables

__all__ = [
    "DiagramBuilder",
    "DiagramColumn",
    "DiagramEdge",
    "DiagramNode",
    "DiagramTable",
    "GraphCache",
    "LayoutResult",
    "Position",
    "calculate_handle_positions",
    "compute_layout",
    "generate_edges",
    "generate_nodes",
    "snapshot_to_tables",
]
