"""Layout cache for diagram computations.

Four maps (nodes, edges, layouts, table lookups) share one access
counter per key. When the tracked key count reaches capacity, a `set`
first evicts the key with the smallest counter from every map.

The cache holds no authoritative state; clearing it only costs
recomputation. Pass an instance to whoever needs it rather than using a
module-level singleton.

Example:
    cache = GraphCache()
    nodes = cache.get_nodes("tables-50")
    if nodes is None:
        nodes = compute_nodes()
        cache.set_nodes("tables-50", nodes)
"""

from __future__ import annotations

import threading
from typing import Any

from slopcollector.graphs.config import GRAPH_CONFIG
from slopcollector.graphs.models import DiagramEdge, DiagramNode, LayoutResult


class GraphCache:
    """Access-counter LRU over four sub-maps.

    Eviction scans for the minimum counter, O(n) in the tracked keys;
    fine at the default capacity of 100.
    """

    def __init__(self, max_size: int = GRAPH_CONFIG.max_cache_size):
        self.max_size = max_size
        self._nodes: dict[str, list[DiagramNode]] = {}
        self._edges: dict[str, list[DiagramEdge]] = {}
        self._layouts: dict[str, LayoutResult] = {}
        self._table_lookups: dict[str, dict[str, str]] = {}

        self._access_order: dict[str, int] = {}
        self._access_counter = 0
        self._lock = threading.Lock()

    # --- nodes ---

    def get_nodes(self, key: str) -> list[DiagramNode] | None:
        return self._get(self._nodes, key)

    def set_nodes(self, key: str, nodes: list[DiagramNode]) -> None:
        self._set(self._nodes, key, nodes)

    # --- edges ---

    def get_edges(self, key: str) -> list[DiagramEdge] | None:
        return self._get(self._edges, key)

    def set_edges(self, key: str, edges: list[DiagramEdge]) -> None:
        self._set(self._edges, key, edges)

    # --- layouts ---

    def get_layout(self, key: str) -> LayoutResult | None:
        return self._get(self._layouts, key)

    def set_layout(self, key: str, layout: LayoutResult) -> None:
        self._set(self._layouts, key, layout)

    # --- table lookups ---

    def get_table_lookup(self, key: str) -> dict[str, str] | None:
        return self._get(self._table_lookups, key)

    def set_table_lookup(self, key: str, lookup: dict[str, str]) -> None:
        self._set(self._table_lookups, key, lookup)

    # --- maintenance ---

    def invalidate(self, pattern: str | None = None) -> None:
        """Drop entries whose key contains `pattern`, or everything when None."""
        with self._lock:
            if not pattern:
                for store in self._stores():
                    store.clear()
                self._access_order.clear()
                return

            keys: set[str] = set(self._access_order)
            for store in self._stores():
                keys.update(store)
            for key in keys:
                if pattern in key:
                    self._drop(key)

    def clear(self) -> None:
        self.invalidate()

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "nodes": len(self._nodes),
                "edges": len(self._edges),
                "layouts": len(self._layouts),
                "table_lookups": len(self._table_lookups),
                "total_entries": len(self._access_order),
            }

    # --- internals ---

    def _stores(self) -> tuple[dict[str, Any], ...]:
        return (self._nodes, self._edges, self._layouts, self._table_lookups)

    def _get(self, store: dict[str, Any], key: str) -> Any:
        with self._lock:
            value = store.get(key)
            if value is not None:
                self._track_access(key)
            return value

    def _set(self, store: dict[str, Any], key: str, value: Any) -> None:
        with self._lock:
            self._evict_if_needed(key)
            store[key] = value
            self._track_access(key)

    def _track_access(self, key: str) -> None:
        self._access_order[key] = self._access_counter
        self._access_counter += 1

    def _evict_if_needed(self, incoming_key: str) -> None:
        # Re-setting an already tracked key does not grow the key set
        if incoming_key in self._access_order:
            return
        if len(self._access_order) < self.max_size:
            return
        lru_key = min(self._access_order, key=self._access_order.__getitem__)
        self._drop(lru_key)

    def _drop(self, key: str) -> None:
        for store in self._stores():
            store.pop(key, None)
        self._access_order.pop(key, None)
