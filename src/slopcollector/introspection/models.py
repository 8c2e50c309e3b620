"""Schema snapshot models.

Python attributes are snake_case; the camelCase aliases are the wire
format stored in snapshot rows and returned by the API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Base for snapshot records: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys, as persisted."""
        return self.model_dump(by_alias=True, mode="json")


class TableSchema(SnapshotModel):
    """A table discovered in the target schema."""

    schema_: str = Field(alias="schema")
    table_name: str
    row_estimate: int | None = None
    description: str | None = None


class ColumnSchema(SnapshotModel):
    """A column with its mapped type and key flags."""

    schema_: str = Field(alias="schema")
    table_name: str
    column_name: str
    data_type: str
    is_nullable: bool
    column_default: str | None = None
    is_primary_key: bool | None = None
    foreign_key_to: str | None = None
    """Resolved "table.column" reference; None when absent or unresolved."""


class IndexSchema(SnapshotModel):
    """An index read from pg_indexes. Only present when the catalog is readable."""

    schema_: str = Field(alias="schema")
    table_name: str
    index_name: str
    is_unique: bool = False
    is_primary: bool = False
    columns: list[str] = Field(default_factory=list)


class ForeignKeyConstraint(SnapshotModel):
    """A real FK constraint reported by the catalog or PostgREST hints."""

    name: str | None = None
    source_table: str
    source_column: str
    target_table: str
    target_column: str

    @property
    def source_key(self) -> str:
        return f"{self.source_table}.{self.source_column}"

    @property
    def target_ref(self) -> str:
        return f"{self.target_table}.{self.target_column}"


class TableStats(SnapshotModel):
    """Row estimate and comment for a table, from pg_class."""

    table_name: str
    row_estimate: int | None = None
    description: str | None = None


class DatabaseSchemaSnapshot(SnapshotModel):
    """Tables, columns and indexes captured at one point in time."""

    tables: list[TableSchema] = Field(default_factory=list)
    columns: list[ColumnSchema] = Field(default_factory=list)
    indexes: list[IndexSchema] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tables

    def columns_for(self, table_name: str) -> list[ColumnSchema]:
        return [c for c in self.columns if c.table_name == table_name]

    def indexes_for(self, table_name: str) -> list[IndexSchema]:
        return [i for i in self.indexes if i.table_name == table_name]
