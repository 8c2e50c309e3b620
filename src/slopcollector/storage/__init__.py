"""Storage layer: SQLAlchemy base and persistence models."""

from slopcollector.storage.base import Base, init_database, metadata_obj, reset_database
from slopcollector.storage.models import (
    AnalysisJob,
    CodePattern,
    Project,
    SchemaSnapshot,
    Suggestion,
)

__all__ = [
    "AnalysisJob",
    "Base",
    "CodePattern",
    "Project",
    "SchemaSnapshot",
    "Suggestion",
    "init_database",
    "metadata_obj",
    "reset_database",
]
