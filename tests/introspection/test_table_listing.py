"""Tests for listing tables from the OpenAPI root document."""

from typing import Any

from slopcollector.introspection.tables import extract_table_names, list_tables


class TestExtractTableNames:
    """Tests for extract_table_names."""

    def test_strips_leading_slash_and_keeps_order(self, sample_openapi: dict[str, Any]):
        names = extract_table_names(sample_openapi)
        assert names == ["users", "posts", "categories", "batches", "shipments"]

    def test_skips_root_path(self):
        assert extract_table_names({"paths": {"/": {}, "/users": {}}}) == ["users"]

    def test_skips_templated_paths(self):
        document = {"paths": {"/users": {}, "/users/{id}": {}}}
        assert extract_table_names(document) == ["users"]

    def test_keeps_rpc_paths(self):
        document = {"paths": {"/rpc/exec_sql": {}, "/orders": {}}}
        assert extract_table_names(document) == ["rpc/exec_sql", "orders"]

    def test_missing_paths(self):
        assert extract_table_names({}) == []
        assert extract_table_names({"paths": []}) == []

    def test_ignores_keys_without_slash(self):
        assert extract_table_names({"paths": {"users": {}, "/posts": {}}}) == ["posts"]


class TestListTables:
    """Tests for list_tables over a client."""

    def test_lists_tables(self, fake_client):
        assert list_tables(fake_client) == ["users", "posts", "categories", "batches", "shipments"]

    def test_network_failure_yields_empty_list(self, make_rest_client):
        client = make_rest_client(document=None)
        assert list_tables(client) == []
