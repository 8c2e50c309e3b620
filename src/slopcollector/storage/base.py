"""Declarative base and table creation for slopcollector.db.

Sessions come from core.connections.ConnectionManager.
"""

from sqlalchemy import MetaData
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase

metadata_obj = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class Base(DeclarativeBase):
    metadata = metadata_obj


def _register_models() -> None:
    from slopcollector.storage import models  # noqa: F401


def init_database(engine: Engine) -> None:
    """Create missing tables and indexes; existing ones are left as they are."""
    _register_models()
    with engine.begin() as conn:
        Base.metadata.create_all(conn)


def reset_database(engine: Engine) -> None:
    """Drop every table and create them again, losing all projects and snapshots."""
    _register_models()
    with engine.begin() as conn:
        Base.metadata.drop_all(conn)
        Base.metadata.create_all(conn)
