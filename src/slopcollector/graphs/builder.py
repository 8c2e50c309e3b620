"""Assemble a laid-out diagram from tables and suggestions, with caching."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING

from slopcollector.core.logging import get_logger
from slopcollector.graphs.cache import GraphCache
from slopcollector.graphs.edges import generate_edges
from slopcollector.graphs.layout import compute_layout
from slopcollector.graphs.models import DiagramTable, LayoutDirection, LayoutResult
from slopcollector.graphs.nodes import generate_nodes

if TYPE_CHECKING:
    from slopcollector.advice.models import Suggestion

logger = get_logger(__name__)


class DiagramBuilder:
    """Builds positioned diagrams and memoizes them per scope.

    A scope is a cache key prefix, typically `"{project_id}:"`, so that
    diagrams for different projects with the same table count do not
    collide. One builder is shared by all API requests.
    """

    def __init__(self, cache: GraphCache | None = None):
        self.cache = cache if cache is not None else GraphCache()
        self._versions: dict[str, int] = {}
        self._versions_lock = threading.Lock()

    def version(self, scope: str) -> int:
        with self._versions_lock:
            return self._versions.get(scope, 0)

    def layout_key(
        self,
        scope: str,
        table_count: int,
        suggestion_count: int,
        direction: LayoutDirection = "TB",
    ) -> str:
        version = self.version(scope)
        return f"{scope}layout-{table_count}-{suggestion_count}-{version}-{direction}"

    def build(
        self,
        tables: Sequence[DiagramTable],
        suggestions: Sequence[Suggestion] = (),
        scope: str = "",
        direction: LayoutDirection = "TB",
    ) -> LayoutResult:
        """Nodes positioned by the layout and edges oriented to face each other."""
        key = self.layout_key(scope, len(tables), len(suggestions), direction)
        cached = self.cache.get_layout(key)
        if cached is not None:
            logger.debug("diagram_cache_hit", key=key)
            return cached

        nodes = generate_nodes(tables, suggestions)
        base_edges = generate_edges(tables, cache=self.cache, scope=scope)
        layout = compute_layout(nodes, base_edges, direction)
        oriented = generate_edges(
            tables,
            node_positions=layout.node_positions,
            cache=self.cache,
            scope=scope,
            direction=direction,
        )

        result = LayoutResult(
            nodes=layout.nodes,
            edges=oriented,
            node_positions=layout.node_positions,
        )
        self.cache.set_layout(key, result)
        logger.info("diagram_built", key=key, nodes=len(result.nodes), edges=len(result.edges))
        return result

    def relayout(self, scope: str = "") -> int:
        """Bump the layout version for a scope; the next build recomputes."""
        with self._versions_lock:
            version = self._versions.get(scope, 0) + 1
            self._versions[scope] = version
        # Edge memo is keyed only by table count; drop it so orientation follows the new layout
        self.cache.invalidate(f"{scope}edges-")
        return version

    def invalidate(self, scope: str | None = None) -> None:
        self.cache.invalidate(scope or None)
