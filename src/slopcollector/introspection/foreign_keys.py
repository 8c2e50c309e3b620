"""Foreign-key resolution.

Two tiers behind one interface:

1. ConstraintForeignKeyResolver: exact references from catalog
   constraints or PostgREST `<fk table='x' column='y'/>` hints.
2. HeuristicForeignKeyResolver: uuid `*_id` columns matched to a table
   via plural guesses. A miss is logged and left unresolved.

ChainedForeignKeyResolver tries them in order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from slopcollector.core.logging import get_logger
from slopcollector.introspection.models import ForeignKeyConstraint
from slopcollector.introspection.pluralize import match_table, name_lookup, plural_variants

logger = get_logger(__name__)

_FK_HINT = re.compile(r"<fk\s+table='([^']+)'\s+column='([^']+)'\s*/>")
_PK_HINT = re.compile(r"<pk\s*/>")

FK_SUFFIX = "_id"


class ForeignKeyResolver(ABC):
    """Resolves a column to the "table.column" it references."""

    @abstractmethod
    def resolve(self, table_name: str, column_name: str, data_type: str) -> str | None:
        """Return the referenced "table.column", or None."""


class ConstraintForeignKeyResolver(ForeignKeyResolver):
    """Authoritative lookup in a {"table.column": "target.column"} map."""

    def __init__(self, constraint_map: Mapping[str, str]):
        self.constraint_map = dict(constraint_map)

    @classmethod
    def from_constraints(
        cls, constraints: Iterable[ForeignKeyConstraint]
    ) -> ConstraintForeignKeyResolver:
        return cls(build_foreign_key_map(constraints))

    def resolve(self, table_name: str, column_name: str, data_type: str) -> str | None:
        return self.constraint_map.get(f"{table_name}.{column_name}")


class HeuristicForeignKeyResolver(ForeignKeyResolver):
    """Naming-convention guess: `category_id uuid` -> `categories.id`."""

    def __init__(self, table_names: Iterable[str]):
        self._lookup = name_lookup(table_names)

    def resolve(self, table_name: str, column_name: str, data_type: str) -> str | None:
        if not is_fk_candidate(column_name, data_type):
            return None

        base = column_name[: -len(FK_SUFFIX)]
        found = match_table(base, self._lookup)
        if found is not None:
            return f"{found}.id"

        logger.warning(
            "fk_target_not_found",
            table=table_name,
            column=column_name,
            tried=plural_variants(base),
        )
        return None


class ChainedForeignKeyResolver(ForeignKeyResolver):
    """First non-None answer from a sequence of resolvers."""

    def __init__(self, resolvers: Sequence[ForeignKeyResolver]):
        self.resolvers = list(resolvers)

    def resolve(self, table_name: str, column_name: str, data_type: str) -> str | None:
        for resolver in self.resolvers:
            ref = resolver.resolve(table_name, column_name, data_type)
            if ref is not None:
                return ref
        return None


def is_fk_candidate(column_name: str, data_type: str) -> bool:
    """uuid typed, named `*_id`, and not literally `id`."""
    return (
        data_type == "uuid"
        and column_name.lower().endswith(FK_SUFFIX)
        and column_name.lower() != "id"
    )


def build_foreign_key_map(constraints: Iterable[ForeignKeyConstraint]) -> dict[str, str]:
    """Map "table.column" to "target_table.target_column". First constraint wins."""
    fk_map: dict[str, str] = {}
    for constraint in constraints:
        fk_map.setdefault(constraint.source_key, constraint.target_ref)
    return fk_map


def parse_openapi_hints(
    definitions: Mapping[str, Any],
) -> tuple[list[ForeignKeyConstraint], dict[str, set[str]]]:
    """Read PostgREST relationship notes from property descriptions.

    PostgREST appends `Note:\\nThis is a Primary Key.<pk/>` and
    `This is a Foreign Key to `x.y`.<fk table='x' column='y'/>` to
    column descriptions.

    Returns:
        (foreign key constraints, {table: primary key column names})
    """
    constraints: list[ForeignKeyConstraint] = []
    primary_keys: dict[str, set[str]] = {}

    for table_name, definition in definitions.items():
        if not isinstance(definition, dict):
            continue
        properties = definition.get("properties")
        if not isinstance(properties, dict):
            continue

        for column_name, descriptor in properties.items():
            if not isinstance(descriptor, dict):
                continue
            description = descriptor.get("description")
            if not isinstance(description, str):
                continue

            if _PK_HINT.search(description):
                primary_keys.setdefault(table_name, set()).add(column_name)

            match = _FK_HINT.search(description)
            if match:
                constraints.append(
                    ForeignKeyConstraint(
                        source_table=table_name,
                        source_column=column_name,
                        target_table=match.group(1),
                        target_column=match.group(2),
                    )
                )

    return constraints, primary_keys


def create_resolver(
    table_names: Iterable[str],
    constraints: Iterable[ForeignKeyConstraint] = (),
) -> ForeignKeyResolver:
    """Authoritative constraints first, naming heuristic as fallback."""
    return ChainedForeignKeyResolver(
        [
            ConstraintForeignKeyResolver.from_constraints(constraints),
            HeuristicForeignKeyResolver(table_names),
        ]
    )
