"""FastAPI application for projects, snapshots, diagrams and advice.

    uvicorn slopcollector.api.main:create_app --factory
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slopcollector import __version__
from slopcollector.api import routers
from slopcollector.core.config import get_settings
from slopcollector.core.connections import close_default_manager, get_connection_manager
from slopcollector.core.logging import get_logger
from slopcollector.graphs.builder import DiagramBuilder
from slopcollector.graphs.cache import GraphCache

logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    get_connection_manager(data_dir=app.state.data_dir)
    logger.info("api_started", data_dir=str(app.state.data_dir))
    yield
    close_default_manager()
    app.state.diagram_builder.invalidate()
    logger.info("api_stopped")


def create_app(data_dir: Path | None = None, cors_origins: list[str] | None = None) -> FastAPI:
    """Build the app.

    Args:
        data_dir: Directory holding slopcollector.db; SLOPCOLLECTOR_DATA_DIR by default
        cors_origins: Allowed origins; SLOPCOLLECTOR_CORS_ORIGINS by default
    """
    settings = get_settings()

    app = FastAPI(
        title="SlopCollector API",
        version=__version__,
        description="Supabase schema introspection, ER diagrams and optimization advice",
        lifespan=lifespan,
    )
    app.state.data_dir = data_dir or settings.data_dir
    # One layout cache per app, shared by every request
    app.state.diagram_builder = DiagramBuilder(GraphCache(settings.layout_cache_size))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins if cors_origins is None else cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router, tag in (
        (routers.projects.router, "projects"),
        (routers.snapshots.router, "snapshots"),
        (routers.diagram.router, "diagram"),
        (routers.advice.router, "advice"),
        (routers.code_patterns.router, "code-patterns"),
    ):
        app.include_router(router, prefix=API_PREFIX, tags=[tag])

    @app.get("/health")  # type: ignore[untyped-decorator]
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app
