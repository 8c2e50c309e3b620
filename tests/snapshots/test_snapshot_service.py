"""Tests for SnapshotService: sync, append-only persistence and reads."""

import pytest
from sqlalchemy import func, select

from slopcollector.core.exceptions import ProjectNotFoundError, SnapshotNotFoundError
from slopcollector.snapshots.service import NO_TABLES_MESSAGE, SnapshotService
from slopcollector.storage import SchemaSnapshot


@pytest.fixture
def service(session, fake_client) -> SnapshotService:
    return SnapshotService(session, client_factory=lambda project: fake_client)


class TestSyncProject:
    """Tests for sync_project."""

    def test_sync_stores_snapshot(self, service, project, session):
        result = service.sync_project(project.project_id)

        assert result.synced
        assert result.table_count == 5
        assert result.column_count == 15
        assert result.index_count == 3
        assert result.foreign_key_count == 3
        assert result.message == "Schema synced"

        row = session.get(SchemaSnapshot, result.snapshot_id)
        assert row is not None
        assert [t["tableName"] for t in row.tables_data][:2] == ["users", "posts"]
        assert row.statistics["table_count"] == 5
        assert row.statistics["openapi_ok"] is True

    def test_sync_stamps_last_synced(self, service, project):
        assert project.last_synced_at is None
        service.sync_project(project.project_id)
        assert project.last_synced_at is not None

    def test_sync_closes_client(self, service, project, fake_client):
        service.sync_project(project.project_id)
        assert fake_client.closed

    def test_unknown_project(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.sync_project("missing")

    def test_zero_tables_stores_nothing(self, session, project, make_rest_client):
        client = make_rest_client(document={"paths": {}, "definitions": {}})
        service = SnapshotService(session, client_factory=lambda p: client)

        result = service.sync_project(project.project_id)

        assert not result.synced
        assert result.snapshot_id is None
        assert result.message == NO_TABLES_MESSAGE
        count = session.execute(select(func.count()).select_from(SchemaSnapshot)).scalar()
        assert count == 0

    def test_unreachable_endpoint_is_zero_tables(self, session, project, make_rest_client):
        client = make_rest_client(document=None)
        service = SnapshotService(session, client_factory=lambda p: client)

        result = service.sync_project(project.project_id)

        assert not result.synced
        assert client.closed

    def test_syncs_append(self, service, project, session):
        first = service.sync_project(project.project_id)
        second = service.sync_project(project.project_id)

        assert first.snapshot_id != second.snapshot_id
        rows = service.list_snapshots(project.project_id)
        assert len(rows) == 2
        assert session.get(SchemaSnapshot, first.snapshot_id) is not None


class TestReadSnapshots:
    """Tests for latest and list reads."""

    def test_latest_round_trips(self, service, project):
        service.sync_project(project.project_id)
        snapshot = service.get_latest_snapshot(project.project_id)

        posts = {c.column_name: c for c in snapshot.columns_for("posts")}
        assert posts["user_id"].foreign_key_to == "users.id"
        assert posts["tags"].data_type == "text[]"
        assert {i.index_name for i in snapshot.indexes_for("posts")} == {
            "posts_pkey",
            "idx_posts_user_id",
        }

    def test_latest_is_newest(self, service, project):
        service.sync_project(project.project_id)
        newest = service.sync_project(project.project_id)
        assert service.get_latest_row(project.project_id).snapshot_id == newest.snapshot_id

    def test_never_synced(self, service, project):
        with pytest.raises(SnapshotNotFoundError, match="sync your project first"):
            service.get_latest_snapshot(project.project_id)

    def test_list_pagination(self, service, project):
        for _ in range(3):
            service.sync_project(project.project_id)
        assert len(service.list_snapshots(project.project_id, skip=1, limit=10)) == 2
        assert len(service.list_snapshots(project.project_id, limit=1)) == 1
