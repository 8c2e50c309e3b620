"""Schema introspection over a PostgREST endpoint.

Table Lister -> Column/Type Mapper (+ Foreign-Key Resolver) -> snapshot.
The full pipeline lives in `introspection.introspector`.
"""

from slopcollector.introspection.client import SupabaseRestClient
from slopcollector.introspection.foreign_keys import (
    ChainedForeignKeyResolver,
    ConstraintForeignKeyResolver,
    ForeignKeyResolver,
    HeuristicForeignKeyResolver,
    create_resolver,
)
from slopcollector.introspection.models import (
    ColumnSchema,
    DatabaseSchemaSnapshot,
    ForeignKeyConstraint,
    IndexSchema,
    TableSchema,
)
from slopcollector.introspection.tables import extract_table_names, list_tables
from slopcollector.introspection.types import map_columns, map_property_type

__all__ = [
    "ChainedForeignKeyResolver",
    "ColumnSchema",
    "ConstraintForeignKeyResolver",
    "DatabaseSchemaSnapshot",
    "ForeignKeyConstraint",
    "ForeignKeyResolver",
    "HeuristicForeignKeyResolver",
    "IndexSchema",
    "SupabaseRestClient",
    "TableSchema",
    "create_resolver",
    "extract_table_names",
    "list_tables",
    "map_columns",
    "map_property_type",
]
