"""Tests for snapshot -> diagram table conversion and issue checks."""

from datetime import UTC, datetime, timedelta

from slopcollector.graphs.analysis import has_table_issues, is_column_unused, needs_index
from slopcollector.graphs.models import DiagramColumn
from slopcollector.graphs.tables import normalize_index_column, snapshot_to_tables
from slopcollector.introspection.models import ColumnSchema, IndexSchema, TableSchema
from slopcollector.snapshots.assembler import assemble_snapshot


def _column(table: str, name: str, **kwargs) -> ColumnSchema:
    return ColumnSchema(
        schema="public",
        table_name=table,
        column_name=name,
        data_type=kwargs.pop("data_type", "uuid"),
        is_nullable=kwargs.pop("is_nullable", True),
        **kwargs,
    )


class TestSnapshotToTables:
    def test_columns_and_flags(self):
        snapshot = assemble_snapshot(
            [
                TableSchema(schema="public", table_name="users"),
                TableSchema(schema="public", table_name="posts", row_estimate=42),
            ],
            [
                _column("users", "id", is_primary_key=True, is_nullable=False),
                _column("posts", "id", is_primary_key=True),
                _column("posts", "user_id", foreign_key_to="users.id"),
                _column("posts", "created_at", data_type="timestamp with time zone"),
            ],
            [
                IndexSchema(
                    schema="public",
                    table_name="posts",
                    index_name="idx_posts_created",
                    columns=['"created_at" DESC'],
                )
            ],
        )

        users, posts = snapshot_to_tables(snapshot)

        assert users.id == users.name == "users"
        assert users.columns[0].primary_key is True
        assert users.columns[0].nullable is False
        assert posts.row_count == 42
        assert posts.column_count == 3
        by_name = {c.name: c for c in posts.columns}
        assert by_name["user_id"].foreign_key == "users.id"
        assert by_name["user_id"].indexed is False
        assert by_name["created_at"].indexed is True
        assert by_name["id"].primary_key is True

    def test_table_without_columns(self):
        snapshot = assemble_snapshot([TableSchema(schema="public", table_name="empty")], [])
        tables = snapshot_to_tables(snapshot)
        assert tables[0].columns == []
        assert tables[0].column_count == 0

    def test_normalize_index_column(self):
        assert normalize_index_column('"created_at" DESC') == "created_at"
        assert normalize_index_column("user_id") == "user_id"
        assert normalize_index_column("  ") == ""


class TestColumnChecks:
    def test_needs_index(self):
        assert needs_index(DiagramColumn(name="user_id", type="uuid", foreign_key="users.id"))
        assert not needs_index(
            DiagramColumn(name="user_id", type="uuid", foreign_key="users.id", indexed=True)
        )
        assert not needs_index(DiagramColumn(name="title", type="text"))

    def test_unused_window(self):
        now = datetime(2026, 1, 1, tzinfo=UTC)
        old = DiagramColumn(name="a", type="text", last_used=now - timedelta(days=366))
        fresh = DiagramColumn(name="b", type="text", last_used=now - timedelta(days=10))
        naive_old = DiagramColumn(name="c", type="text", last_used=datetime(2020, 1, 1))

        assert is_column_unused(old, now)
        assert not is_column_unused(fresh, now)
        assert is_column_unused(naive_old, now)
        assert not is_column_unused(DiagramColumn(name="d", type="text"), now)

    def test_indexed_foreign_keys_are_not_issues(self, make_table):
        flagged = make_table(
            "posts",
            DiagramColumn(name="user_id", type="uuid", foreign_key="users.id"),
            DiagramColumn(name="category_id", type="uuid", foreign_key="categories.id"),
            DiagramColumn(name="org_id", type="uuid", foreign_key="orgs.id", indexed=True),
        )
        clean = make_table(
            "tags", DiagramColumn(name="org_id", type="uuid", foreign_key="orgs.id", indexed=True)
        )
        assert has_table_issues(flagged)
        assert not has_table_issues(clean)
