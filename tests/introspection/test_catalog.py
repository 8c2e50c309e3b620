"""Tests for catalog reads through the SQL RPC."""

import pytest

from slopcollector.introspection.catalog import (
    extract_index_columns,
    fetch_foreign_keys,
    fetch_indexes,
    fetch_table_stats,
    is_valid_schema_name,
)


class TestExtractIndexColumns:
    @pytest.mark.parametrize(
        ("index_def", "expected"),
        [
            ("CREATE INDEX ix ON public.posts USING btree (user_id)", ["user_id"]),
            (
                'CREATE INDEX ix ON public.posts USING btree ("user_id", created_at)',
                ["user_id", "created_at"],
            ),
            ("CREATE INDEX ix ON public.posts", []),
            ("", []),
            (None, []),
        ],
    )
    def test_columns(self, index_def, expected):
        assert extract_index_columns(index_def) == expected


class TestSchemaName:
    def test_plain_identifier(self):
        assert is_valid_schema_name("public")
        assert is_valid_schema_name("app_v2")

    def test_rejects_injection(self):
        assert not is_valid_schema_name("public'; drop table users; --")
        assert not is_valid_schema_name("")


class TestFetchForeignKeys:
    def test_rows_become_constraints(self, fake_client):
        constraints = fetch_foreign_keys(fake_client)
        assert len(constraints) == 1
        assert constraints[0].name == "posts_user_id_fkey"
        assert constraints[0].source_key == "posts.user_id"
        assert constraints[0].target_ref == "users.id"

    def test_schema_is_interpolated(self, fake_client):
        fetch_foreign_keys(fake_client, schema="app")
        assert "tc.table_schema = 'app'" in fake_client.queries[0]

    def test_rpc_unavailable_yields_empty(self, make_rest_client):
        client = make_rest_client(document={}, catalog_available=False)
        assert fetch_foreign_keys(client) == []

    def test_invalid_schema_skips_query(self, fake_client):
        assert fetch_foreign_keys(fake_client, schema="x'--") == []
        assert fake_client.queries == []

    def test_incomplete_row_is_dropped(self, make_rest_client):
        client = make_rest_client(document={}, fk_rows=[{"table_name": "posts"}])
        assert fetch_foreign_keys(client) == []


class TestFetchIndexes:
    def test_rows_become_indexes(self, fake_client):
        indexes = {i.index_name: i for i in fetch_indexes(fake_client)}

        assert set(indexes) == {"posts_pkey", "idx_posts_user_id", "users_pkey"}
        assert indexes["posts_pkey"].is_primary is True
        assert indexes["posts_pkey"].is_unique is True
        assert indexes["posts_pkey"].columns == ["id"]
        assert indexes["idx_posts_user_id"].is_primary is False
        assert indexes["idx_posts_user_id"].is_unique is False
        assert indexes["idx_posts_user_id"].columns == ["user_id"]

    def test_rpc_unavailable_yields_empty(self, make_rest_client):
        client = make_rest_client(document={}, catalog_available=False)
        assert fetch_indexes(client) == []

    def test_malformed_row_is_dropped(self, make_rest_client):
        rows = [
            {"table_name": 42, "index_name": "bad_idx", "index_def": "CREATE INDEX bad_idx"},
            {
                "table_name": "posts",
                "index_name": "idx_posts_title",
                "index_def": "CREATE INDEX idx_posts_title ON public.posts USING btree (title)",
            },
        ]
        client = make_rest_client(document={}, index_rows=rows)

        indexes = fetch_indexes(client)

        assert [i.index_name for i in indexes] == ["idx_posts_title"]


class TestFetchTableStats:
    def test_negative_estimate_is_unknown(self, fake_client):
        stats = {s.table_name: s for s in fetch_table_stats(fake_client)}
        assert stats["posts"].row_estimate == 128000
        assert stats["posts"].description == "Blog posts"
        assert stats["users"].row_estimate is None

    def test_unparseable_estimate_drops_row(self, make_rest_client):
        rows = [
            {"table_name": "posts", "row_estimate": "lots"},
            {"table_name": "users", "row_estimate": "1500.0"},
            {"table_name": "tags", "row_estimate": [3]},
        ]
        client = make_rest_client(document={}, stats_rows=rows)

        stats = fetch_table_stats(client)

        assert [(s.table_name, s.row_estimate) for s in stats] == [("users", 1500)]
