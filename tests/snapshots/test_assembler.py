"""Tests for snapshot assembly and row (de)serialization."""

from slopcollector.introspection.models import ColumnSchema, IndexSchema, TableSchema
from slopcollector.snapshots.assembler import (
    assemble_snapshot,
    snapshot_from_row,
    snapshot_to_row_data,
)
from slopcollector.storage import SchemaSnapshot


def _snapshot():
    return assemble_snapshot(
        [TableSchema(schema="public", table_name="posts", row_estimate=10)],
        [
            ColumnSchema(
                schema="public",
                table_name="posts",
                column_name="user_id",
                data_type="uuid",
                is_nullable=False,
                foreign_key_to="users.id",
            )
        ],
        [
            IndexSchema(
                schema="public",
                table_name="posts",
                index_name="idx_posts_user_id",
                columns=["user_id"],
            )
        ],
    )


def test_assemble_keeps_inputs():
    snapshot = _snapshot()
    assert not snapshot.is_empty
    assert len(snapshot.tables) == 1
    assert snapshot.columns_for("posts")[0].column_name == "user_id"
    assert snapshot.indexes_for("posts")[0].index_name == "idx_posts_user_id"
    assert snapshot.columns_for("users") == []


def test_empty_snapshot():
    assert assemble_snapshot([], []).is_empty


def test_row_data_is_camel_case():
    data = snapshot_to_row_data(_snapshot())
    assert data["tables_data"][0] == {
        "schema": "public",
        "tableName": "posts",
        "rowEstimate": 10,
        "description": None,
    }
    assert data["columns_data"][0]["foreignKeyTo"] == "users.id"
    assert data["indexes_data"][0]["indexName"] == "idx_posts_user_id"


def test_row_round_trip():
    snapshot = _snapshot()
    row = SchemaSnapshot(project_id="p", **snapshot_to_row_data(snapshot))
    assert snapshot_from_row(row) == snapshot
