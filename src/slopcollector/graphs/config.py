"""Constants for diagram generation and layout."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NodeDimensions:
    width: int = 350
    base_height: int = 200
    header_height: int = 100
    column_height: int = 28  # per column row

    def height_for(self, column_count: int) -> int:
        return max(self.base_height, self.header_height + column_count * self.column_height)


@dataclass(frozen=True)
class LayoutSpacing:
    """Spacing between nodes in a rank (nodesep) and between ranks (ranksep)."""

    nodesep_with_edges: int = 250
    nodesep_without_edges: int = 150
    ranksep_with_edges: int = 350
    ranksep_without_edges: int = 250
    edgesep: int = 150
    margin_x: int = 220
    margin_y: int = 220

    def nodesep(self, has_edges: bool) -> int:
        return self.nodesep_with_edges if has_edges else self.nodesep_without_edges

    def ranksep(self, has_edges: bool) -> int:
        return self.ranksep_with_edges if has_edges else self.ranksep_without_edges


@dataclass(frozen=True)
class EdgeColors:
    normal: str = "#7ed321"
    missing_index: str = "#ff6b6b"
    label: str = "#ccc"
    label_background: str = "#0f0f0f"


@dataclass(frozen=True)
class GraphConfig:
    node: NodeDimensions = field(default_factory=NodeDimensions)
    layout: LayoutSpacing = field(default_factory=LayoutSpacing)
    edge_colors: EdgeColors = field(default_factory=EdgeColors)
    max_cache_size: int = 100
    stale_column_days: int = 365


GRAPH_CONFIG = GraphConfig()
