"""SQLite engine and session lifecycle for the CLI and API.

The API serves sync endpoints from FastAPI's threadpool, so sessions are
per-request and commits go through one lock. The database runs in WAL
mode so diagram and suggestion reads do not wait on a sync write.

    manager = ConnectionManager(ConnectionConfig.for_directory(data_dir))
    manager.initialize()
    with manager.session_scope() as session:
        session.add(Project(...))
    manager.close()
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from slopcollector.core.logging import get_logger
from slopcollector.storage import init_database

logger = get_logger(__name__)

DATABASE_FILENAME = "slopcollector.db"

_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
)


@dataclass
class ConnectionConfig:
    """Where the database lives and how the pool behaves."""

    sqlite_path: Path
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: float = 30.0
    busy_timeout: float = 30.0
    echo_sql: bool = False

    @classmethod
    def for_directory(cls, data_dir: Path, **overrides: Any) -> ConnectionConfig:
        return cls(sqlite_path=data_dir / DATABASE_FILENAME, **overrides)


@dataclass
class ConnectionManager:
    """Owns the engine; hands out sessions that commit under a shared lock."""

    config: ConnectionConfig
    _engine: Engine | None = field(default=None, init=False, repr=False)
    _sessions: sessionmaker[Session] | None = field(default=None, init=False, repr=False)
    _commit_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _init_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def initialized(self) -> bool:
        return self._sessions is not None

    def initialize(self) -> None:
        """Create the data directory, engine and tables. Idempotent.

        Raises:
            RuntimeError: The database could not be opened or created
        """
        with self._init_lock:
            if self.initialized:
                return
            try:
                self._engine = self._create_engine()
                init_database(self._engine)
            except Exception as e:
                self.close()
                raise RuntimeError(f"Failed to open {self.config.sqlite_path}: {e}") from e

            # Writes happen at commit time, under the lock
            self._sessions = sessionmaker(self._engine, expire_on_commit=False, autoflush=False)
            logger.debug("database_opened", path=str(self.config.sqlite_path))

    def _create_engine(self) -> Engine:
        self.config.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{self.config.sqlite_path}",
            echo=self.config.echo_sql,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False},
        )
        busy_ms = int(self.config.busy_timeout * 1000)

        @event.listens_for(engine, "connect")
        def apply_pragmas(dbapi_conn: Any, connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            for pragma in (*_PRAGMAS, f"PRAGMA busy_timeout={busy_ms}"):
                cursor.execute(pragma)
            cursor.close()

        return engine

    @contextmanager
    def session_scope(self) -> Generator[Session]:
        """Yield a session; commit on success, roll back and re-raise on error.

        Raises:
            RuntimeError: initialize() was not called
        """
        if self._sessions is None:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")

        session = self._sessions()
        try:
            yield session
            with self._commit_lock:
                session.commit()
        except Exception:
            logger.debug("session_rollback", thread=threading.current_thread().name)
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None


_default_manager: ConnectionManager | None = None


def get_connection_manager(data_dir: Path | None = None) -> ConnectionManager:
    """The process-wide manager used by the API, created on first call.

    `data_dir` only matters on the first call; it defaults to
    SLOPCOLLECTOR_DATA_DIR.
    """
    global _default_manager

    if _default_manager is None:
        if data_dir is None:
            from slopcollector.core.config import get_settings

            data_dir = get_settings().data_dir
        manager = ConnectionManager(ConnectionConfig.for_directory(data_dir))
        manager.initialize()
        _default_manager = manager

    return _default_manager


def close_default_manager() -> None:
    global _default_manager

    if _default_manager is not None:
        _default_manager.close()
        _default_manager = None
