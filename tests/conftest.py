"""Shared pytest fixtures for all tests."""

from __future__ import annotations

import copy
import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from slopcollector.core.logging import configure_logging
from slopcollector.core.models import Result
from slopcollector.llm.config import LLMConfig, ProviderConfig
from slopcollector.llm.prompts import PromptRenderer
from slopcollector.llm.providers.base import LLMProvider, LLMRequest, LLMResponse
from slopcollector.snapshots.service import SnapshotService
from slopcollector.storage import Project, SchemaSnapshot, init_database

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "config" / "prompts"

UUID = {"type": "string", "format": "uuid"}

SAMPLE_OPENAPI: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "PostgREST API", "version": "12.0.2"},
    "paths": {
        "/": {"get": {}},
        "/users": {"get": {}},
        "/posts": {"get": {}},
        "/categories": {"get": {}},
        "/batches": {"get": {}},
        "/shipments": {"get": {}},
    },
    "definitions": {
        "users": {
            "required": ["id", "email"],
            "properties": {
                "id": {**UUID, "description": "Note:\nThis is a Primary Key.<pk/>"},
                "email": {"type": "string", "format": "character varying", "maxLength": 255},
                "created_at": {
                    "type": "string",
                    "format": "timestamp with time zone",
                    "default": "now()",
                },
            },
        },
        "posts": {
            "required": ["id", "user_id", "title"],
            "properties": {
                "id": {"type": "integer", "format": "bigint"},
                "user_id": UUID,
                "category_id": UUID,
                "title": {"type": "string", "format": "text"},
                "tags": {"type": "array", "items": {"type": "string", "format": "text"}},
                "published": {"type": "boolean", "default": False},
            },
        },
        "categories": {
            "properties": {
                "id": UUID,
                "name": {"type": "string", "format": "text"},
            },
        },
        "batches": {
            "properties": {
                "id": UUID,
                "owner_id": UUID,
            },
        },
        "shipments": {
            "properties": {
                "id": UUID,
                "batch_id": UUID,
            },
        },
    },
}

SAMPLE_FK_ROWS = [
    {
        "table_name": "posts",
        "column_name": "user_id",
        "foreign_table_name": "users",
        "foreign_column_name": "id",
        "constraint_name": "posts_user_id_fkey",
    },
]

SAMPLE_INDEX_ROWS = [
    {
        "schema": "public",
        "table_name": "posts",
        "index_name": "posts_pkey",
        "index_def": "CREATE UNIQUE INDEX posts_pkey ON public.posts USING btree (id)",
    },
    {
        "schema": "public",
        "table_name": "posts",
        "index_name": "idx_posts_user_id",
        "index_def": "CREATE INDEX idx_posts_user_id ON public.posts USING btree (user_id)",
    },
    {
        "schema": "public",
        "table_name": "users",
        "index_name": "users_pkey",
        "index_def": "CREATE UNIQUE INDEX users_pkey ON public.users USING btree (id)",
    },
]

SAMPLE_STATS_ROWS = [
    {"table_name": "posts", "row_estimate": 128000, "description": "Blog posts"},
    {"table_name": "users", "row_estimate": -1, "description": None},
]


class FakeRestClient:
    """Stands in for SupabaseRestClient without any network."""

    def __init__(
        self,
        document: dict[str, Any] | None = None,
        fk_rows: list[dict[str, Any]] | None = None,
        index_rows: list[dict[str, Any]] | None = None,
        stats_rows: list[dict[str, Any]] | None = None,
        catalog_available: bool = True,
    ):
        self.document = document
        self.fk_rows = fk_rows or []
        self.index_rows = index_rows or []
        self.stats_rows = stats_rows or []
        self.catalog_available = catalog_available
        self.queries: list[str] = []
        self.closed = False

    def fetch_openapi(self) -> Result[dict[str, Any]]:
        if self.document is None:
            return Result.fail("connection refused")
        return Result.ok(copy.deepcopy(self.document))

    def run_sql(self, query: str) -> Result[list[dict[str, Any]]]:
        self.queries.append(query)
        if not self.catalog_available:
            return Result.fail("SQL RPC 'exec_sql' unavailable: 404")
        if "table_constraints" in query:
            return Result.ok(list(self.fk_rows))
        if "pg_indexes" in query:
            return Result.ok(list(self.index_rows))
        if "pg_class" in query:
            return Result.ok(list(self.stats_rows))
        return Result.ok([])

    def close(self) -> None:
        self.closed = True


class FakeLLMProvider(LLMProvider):
    """Returns canned content and records requests."""

    def __init__(self, content: str | None = None, error: str | None = None):
        self.content = content
        self.error = error
        self.requests: list[LLMRequest] = []

    def complete(self, request: LLMRequest) -> Result[LLMResponse]:
        self.requests.append(request)
        if self.error is not None:
            return Result.fail(self.error)
        return Result.ok(
            LLMResponse(
                content=self.content or "{}",
                model=request.model or "fake-model",
                input_tokens=100,
                output_tokens=50,
            )
        )

    def get_model_for_tier(self, tier: str) -> str:
        return f"fake-{tier}"


SAMPLE_ADVICE: dict[str, Any] = {
    "summary": "Two foreign keys lack indexes and one table is missing RLS.",
    "advisories": [
        {
            "severity": "error",
            "category": "missing_index",
            "table": "posts",
            "column": "category_id",
            "headline": "Add index on posts.category_id",
            "description": "Foreign key posts.category_id has no index, so joins scan the table.",
            "remediation": "CREATE INDEX idx_posts_category_id ON posts(category_id);",
            "estimatedImpact": "high",
        },
        {
            "severity": "info",
            "category": "normalization",
            "table": "users",
            "headline": "Consider splitting profile fields",
            "description": "Rarely read profile columns could move to a side table.",
        },
    ],
    "stats": {"totalIssues": 2, "criticalIssues": 1, "warningIssues": 0, "infoIssues": 1},
}


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None]:
    """Put back the default logging setup that CLI commands replace."""
    yield
    structlog.reset_defaults()
    configure_logging()


@pytest.fixture
def sample_openapi() -> dict[str, Any]:
    """PostgREST OpenAPI document for users/posts/categories/batches/shipments."""
    return copy.deepcopy(SAMPLE_OPENAPI)


@pytest.fixture
def fake_client(sample_openapi: dict[str, Any]) -> FakeRestClient:
    """REST client with the sample document and catalog rows."""
    return FakeRestClient(
        document=sample_openapi,
        fk_rows=SAMPLE_FK_ROWS,
        index_rows=SAMPLE_INDEX_ROWS,
        stats_rows=SAMPLE_STATS_ROWS,
    )


@pytest.fixture
def make_rest_client() -> type[FakeRestClient]:
    """The FakeRestClient class, for tests that need custom documents or failures."""
    return FakeRestClient


@pytest.fixture
def make_provider() -> type[FakeLLMProvider]:
    return FakeLLMProvider


@pytest.fixture(scope="function")
def engine() -> Generator[Engine]:
    """Create an in-memory SQLite engine for testing.

    Creates a fresh database for each test function.
    """
    test_engine = create_engine("sqlite:///:memory:", echo=False)

    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_database(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a test database session."""
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    with factory() as sess:
        yield sess


@pytest.fixture
def project(session: Session) -> Project:
    """A registered project."""
    proj = Project(
        project_id="proj-1",
        name="Shop",
        supabase_url="https://shop.supabase.co",
        api_key="test-key",
    )
    session.add(proj)
    session.flush()
    return proj


@pytest.fixture
def snapshot_row(session: Session, project: Project, fake_client: FakeRestClient) -> SchemaSnapshot:
    """The project synced once against the sample schema."""
    service = SnapshotService(session, client_factory=lambda p: fake_client)
    service.sync_project(project.project_id)
    return service.get_latest_row(project.project_id)


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(
        providers={"fake": ProviderConfig(api_key_env="FAKE_API_KEY", default_model="fake-model")},
        active_provider="fake",
    )


@pytest.fixture
def prompt_renderer() -> PromptRenderer:
    return PromptRenderer(PROMPTS_DIR)


@pytest.fixture
def sample_advice() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_ADVICE)


@pytest.fixture
def fake_provider() -> FakeLLMProvider:
    """Provider that answers with SAMPLE_ADVICE."""
    return FakeLLMProvider(content=json.dumps(SAMPLE_ADVICE))


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "slopcollector_data"
    directory.mkdir()
    return directory


@pytest.fixture
def test_client(
    data_dir: Path,
    fake_client: FakeRestClient,
    fake_provider: FakeLLMProvider,
    llm_config: LLMConfig,
    prompt_renderer: PromptRenderer,
) -> Generator[TestClient]:
    """FastAPI test client with an isolated database and no network.

    Syncs use `fake_client`; advice uses `fake_provider`.
    """
    from slopcollector.advice.generator import AdviceGenerator
    from slopcollector.api.deps import get_advice_generator, get_client_factory
    from slopcollector.api.main import create_app
    from slopcollector.core.connections import close_default_manager

    close_default_manager()
    app = create_app(data_dir=data_dir)
    app.dependency_overrides[get_client_factory] = lambda: (lambda project: fake_client)
    app.dependency_overrides[get_advice_generator] = lambda: AdviceGenerator(
        llm_config, fake_provider, prompt_renderer
    )

    with TestClient(app) as client:
        yield client

    close_default_manager()
