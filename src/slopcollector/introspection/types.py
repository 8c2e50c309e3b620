"""Column/type mapping from PostgREST OpenAPI definitions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from slopcollector.core.logging import get_logger
from slopcollector.introspection.foreign_keys import ForeignKeyResolver
from slopcollector.introspection.models import ColumnSchema

logger = get_logger(__name__)

UNKNOWN_TYPE = "unknown"


def map_property_type(descriptor: Mapping[str, Any]) -> str:
    """Map a JSON-Schema-ish property descriptor to a Postgres-like type name.

    PostgREST puts the real Postgres type in `format` ("bigint", "uuid",
    "timestamp with time zone", "character varying", ...).
    """
    json_type = descriptor.get("type")
    fmt = str(descriptor.get("format") or "").lower()

    if json_type == "integer":
        if "int8" in fmt or "bigint" in fmt:
            return "bigint"
        return "integer"

    if json_type == "string":
        if fmt == "uuid":
            return "uuid"
        if fmt == "date-time" or "timestamp" in fmt:
            return "timestamp with time zone"
        if fmt == "date":
            return "date"
        if fmt.startswith("time"):
            return "time"
        max_length = descriptor.get("maxLength")
        if isinstance(max_length, int) and not isinstance(max_length, bool):
            return f"varchar({max_length})"
        return "text"

    if json_type == "boolean":
        return "boolean"

    if json_type == "object":
        return "jsonb"

    if json_type == "array":
        items = descriptor.get("items")
        if isinstance(items, Mapping):
            item_type = map_property_type(items)
            if item_type != UNKNOWN_TYPE:
                return f"{item_type}[]"
        return "array"

    return UNKNOWN_TYPE


def map_columns(
    table_names: Sequence[str],
    definitions: Mapping[str, Any],
    resolver: ForeignKeyResolver | None = None,
    primary_keys: Mapping[str, set[str]] | None = None,
    schema: str = "public",
) -> list[ColumnSchema]:
    """Columns for every listed table that has a definition.

    Args:
        table_names: Tables from the lister, in order
        definitions: The document's `definitions` section
        resolver: FK resolver; no FKs are set when None
        primary_keys: Authoritative PK columns per table. Tables present
            here ignore the `id` naming convention.
        schema: Schema name stamped on every column

    Returns:
        Columns in table order, then declared property order
    """
    primary_keys = primary_keys or {}
    columns: list[ColumnSchema] = []

    for table_name in table_names:
        definition = definitions.get(table_name)
        if not isinstance(definition, Mapping):
            continue

        properties = definition.get("properties")
        if not isinstance(properties, Mapping):
            continue

        required = set(definition.get("required") or [])
        known_pks = primary_keys.get(table_name)

        for column_name, descriptor in properties.items():
            if not isinstance(descriptor, Mapping):
                continue

            data_type = map_property_type(descriptor)
            if known_pks is not None:
                is_pk = column_name in known_pks
            else:
                is_pk = column_name == "id"

            default = descriptor.get("default")
            columns.append(
                ColumnSchema(
                    schema=schema,
                    table_name=table_name,
                    column_name=column_name,
                    data_type=data_type,
                    is_nullable=column_name not in required,
                    column_default=None if default is None else str(default),
                    is_primary_key=is_pk,
                    foreign_key_to=(
                        resolver.resolve(table_name, column_name, data_type) if resolver else None
                    ),
                )
            )

        logger.debug("table_columns_mapped", table=table_name, count=len(properties))

    return columns
