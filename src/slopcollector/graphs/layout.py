"""Hierarchical layout for the schema diagram.

networkx holds the table graph: referenced (parent) tables point at the
tables that reference them, and FK cycles are broken. grandalf's
SugiyamaLayout then ranks and positions each connected component, and
components are placed side by side.
"""

from __future__ import annotations

from collections.abc import Sequence

import networkx as nx
from grandalf.graphs import Edge, Graph, Vertex
from grandalf.layouts import SugiyamaLayout

from slopcollector.core.logging import get_logger
from slopcollector.graphs.config import GRAPH_CONFIG
from slopcollector.graphs.models import (
    DiagramEdge,
    DiagramNode,
    LayoutDirection,
    LayoutResult,
    Position,
)

logger = get_logger(__name__)


class _BoxView:
    """Node box handed to grandalf; `xy` holds its center after drawing."""

    def __init__(self, w: float, h: float):
        self.w = w
        self.h = h
        self.xy: tuple[float, float] = (0.0, 0.0)


def node_size(node: DiagramNode) -> tuple[int, int]:
    """(width, height) for a table node."""
    dims = GRAPH_CONFIG.node
    return dims.width, dims.height_for(len(node.data.table.columns))


def _rank_graph(nodes: Sequence[DiagramNode], edges: Sequence[DiagramEdge]) -> nx.DiGraph:
    """Parent -> child graph with self-loops and cycles removed."""
    graph = nx.DiGraph()
    graph.add_nodes_from(n.id for n in nodes)

    for edge in edges:
        if edge.source == edge.target:
            continue
        if edge.source in graph and edge.target in graph:
            # FK edges point child -> parent; rank the parent first
            graph.add_edge(edge.target, edge.source)

    removed = 0
    while True:
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            break
        u, v = cycle[-1][:2]
        graph.remove_edge(u, v)
        removed += 1

    if removed:
        logger.debug("layout_cycles_broken", removed_edges=removed)
    return graph


def _place_component(
    component: nx.DiGraph,
    boxes: dict[str, tuple[float, float]],
    nodesep: float,
    ranksep: float,
) -> dict[str, tuple[float, float]]:
    """Top-down centers for one connected component, relative to its top-left corner."""
    if component.number_of_nodes() == 1:
        (node_id,) = component.nodes
        width, height = boxes[node_id]
        return {node_id: (width / 2, height / 2)}

    vertices = {node_id: Vertex(node_id) for node_id in component.nodes}
    for node_id, vertex in vertices.items():
        vertex.view = _BoxView(*boxes[node_id])
    core = Graph(
        list(vertices.values()),
        [Edge(vertices[u], vertices[v]) for u, v in component.edges],
    ).C[0]

    sugiyama = SugiyamaLayout(core)
    sugiyama.xspace = nodesep
    sugiyama.yspace = ranksep
    roots = [vertices[n] for n, degree in component.in_degree() if degree == 0]
    sugiyama.init_all(roots=roots)
    sugiyama.draw()

    views = {node_id: vertex.view for node_id, vertex in vertices.items()}
    left = min(view.xy[0] - view.w / 2 for view in views.values())
    top = min(view.xy[1] - view.h / 2 for view in views.values())
    return {node_id: (view.xy[0] - left, view.xy[1] - top) for node_id, view in views.items()}


def compute_layout(
    nodes: Sequence[DiagramNode],
    edges: Sequence[DiagramEdge],
    direction: LayoutDirection = "TB",
) -> LayoutResult:
    """Position nodes in ranks.

    Args:
        nodes: Table nodes; their current positions are ignored
        edges: FK edges (source references target)
        direction: "TB" stacks ranks vertically, "LR" horizontally

    Returns:
        LayoutResult with top-left node positions and node centers
    """
    if not nodes:
        return LayoutResult(edges=list(edges))

    spacing = GRAPH_CONFIG.layout
    has_edges = bool(edges)
    nodesep = spacing.nodesep(has_edges)
    ranksep = spacing.ranksep(has_edges)
    horizontal = direction == "LR"

    sizes = {n.id: node_size(n) for n in nodes}
    # grandalf always ranks top-down; LR lays out transposed boxes and swaps axes back
    boxes = {
        node_id: (float(h), float(w)) if horizontal else (float(w), float(h))
        for node_id, (w, h) in sizes.items()
    }
    input_order = {n.id: i for i, n in enumerate(nodes)}

    graph = _rank_graph(nodes, edges)
    components = sorted(
        nx.weakly_connected_components(graph),
        key=lambda ids: min(input_order[i] for i in ids),
    )

    centers: dict[str, Position] = {}
    offset = 0.0
    for ids in components:
        placed = _place_component(graph.subgraph(ids), boxes, nodesep, ranksep)
        for node_id, (cross, main) in placed.items():
            shifted = cross + offset
            if horizontal:
                centers[node_id] = Position(x=spacing.margin_x + main, y=spacing.margin_y + shifted)
            else:
                centers[node_id] = Position(x=spacing.margin_x + shifted, y=spacing.margin_y + main)
        offset += max(cross + boxes[n][0] / 2 for n, (cross, _) in placed.items()) + nodesep

    positioned = []
    for node in nodes:
        width, height = sizes[node.id]
        center = centers[node.id]
        top_left = Position(x=center.x - width / 2, y=center.y - height / 2)
        positioned.append(node.model_copy(update={"position": top_left}))

    logger.debug(
        "layout_computed",
        nodes=len(nodes),
        edges=len(edges),
        components=len(components),
        direction=direction,
    )
    return LayoutResult(nodes=positioned, edges=list(edges), node_positions=centers)
