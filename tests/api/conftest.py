"""Fixtures for API router tests."""

from typing import Any

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def created_project(test_client: TestClient) -> dict[str, Any]:
    """A project registered through the API."""
    response = test_client.post(
        "/api/v1/projects",
        json={
            "name": "Shop",
            "supabase_url": "https://shop.supabase.co/",
            "api_key": "anon-key",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def synced_project(test_client: TestClient, created_project: dict[str, Any]) -> dict[str, Any]:
    """A project with one snapshot."""
    response = test_client.post(f"/api/v1/projects/{created_project['project_id']}/sync")
    assert response.status_code == 200
    return created_project
