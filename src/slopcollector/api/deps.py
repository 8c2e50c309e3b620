"""FastAPI dependency injection.

Database sessions come from the shared ConnectionManager. The diagram
builder lives on app.state; the REST and GitHub source factories and the
advice generator are plain dependencies so tests can override them.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from slopcollector.advice.generator import AdviceGenerator
from slopcollector.codescan.sources import GitHubSource
from slopcollector.core.config import get_settings
from slopcollector.core.connections import get_connection_manager
from slopcollector.graphs.builder import DiagramBuilder
from slopcollector.llm import PromptRenderer, create_provider_from_config, load_llm_config
from slopcollector.snapshots.service import ClientFactory, default_client_factory


def get_session() -> Generator[Session]:
    """Sync SQLAlchemy session; FastAPI runs sync endpoints in its threadpool."""
    manager = get_connection_manager()
    with manager.session_scope() as session:
        yield session


def get_diagram_builder(request: Request) -> DiagramBuilder:
    builder: DiagramBuilder = request.app.state.diagram_builder
    return builder


def get_client_factory() -> ClientFactory:
    return default_client_factory


GitHubSourceFactory = Callable[[str, str], GitHubSource]


def get_github_source_factory() -> GitHubSourceFactory:
    settings = get_settings()

    def factory(repo_url: str, branch: str) -> GitHubSource:
        return GitHubSource(
            repo_url, branch, token=settings.github_token, timeout=settings.http_timeout
        )

    return factory


def get_advice_generator() -> AdviceGenerator:
    """Build the generator from config/llm.yaml.

    Raises:
        HTTPException: 503 when the LLM config or API key is missing
    """
    try:
        config = load_llm_config()
        provider = create_provider_from_config(config)
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=503, detail=f"LLM is not configured: {e}") from e
    return AdviceGenerator(config, provider, PromptRenderer())


SessionDep = Annotated[Session, Depends(get_session)]
BuilderDep = Annotated[DiagramBuilder, Depends(get_diagram_builder)]
ClientFactoryDep = Annotated[ClientFactory, Depends(get_client_factory)]
AdviceGeneratorDep = Annotated[AdviceGenerator, Depends(get_advice_generator)]
GitHubSourceFactoryDep = Annotated[GitHubSourceFactory, Depends(get_github_source_factory)]


def pagination_params(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
) -> tuple[int, int]:
    """Common pagination parameters."""
    return skip, limit


PaginationDep = Annotated[tuple[int, int], Depends(pagination_params)]
