"""Table listing from the PostgREST OpenAPI root document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from slopcollector.core.logging import get_logger

if TYPE_CHECKING:
    from slopcollector.introspection.client import SupabaseRestClient

logger = get_logger(__name__)


def extract_table_names(document: dict[str, Any]) -> list[str]:
    """Table names from the document's path keys.

    Each key starting with "/" is a table once the slash is stripped.
    Templated paths (containing "{") and the bare root are skipped.
    Server order is kept.
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return []

    names: list[str] = []
    for path in paths:
        if not isinstance(path, str) or not path.startswith("/"):
            continue
        if "{" in path:
            continue
        name = path[1:]
        if name:
            names.append(name)
    return names


def list_tables(client: SupabaseRestClient) -> list[str]:
    """Fetch the root document and list table names.

    Any network or parse failure yields an empty list.
    """
    result = client.fetch_openapi()
    if not result.success:
        logger.warning("table_list_unavailable", error=result.error)
        return []
    return extract_table_names(result.unwrap())
