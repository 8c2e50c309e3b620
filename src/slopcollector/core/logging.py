"""Structured logging with structlog.

Console rendering for the CLI, JSON lines for the API server. Project
API keys travel through introspection and LLM calls, so every event
passes a redaction processor before it is rendered.

    logger = get_logger(__name__)
    logger.info("sync_started", project_id=project_id)

    with log_context(project_id=project_id):
        logger.warning("fk_target_not_found", table="posts", column="tag_id")
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, TextIO, cast

import structlog
from structlog.typing import FilteringBoundLogger

REDACTED = "***"

_SECRET_KEYS = frozenset({"api_key", "apikey", "authorization", "service_role_key", "token"})
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+")

# Chatty HTTP client libraries, kept at WARNING unless running at DEBUG
_NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "anthropic", "openai")

class _CurrentStderr:
    """Stream that writes to whatever sys.stderr is at write time.

    Loggers are cached on first use, so binding them to the sys.stderr of
    configure time would keep a replaced (and possibly closed) stream alive.
    """

    def write(self, message: str) -> int:
        return sys.stderr.write(message)

    def flush(self) -> None:
        sys.stderr.flush()


_scoped_context: ContextVar[dict[str, Any] | None] = ContextVar("scoped_context", default=None)


def _merge_scoped_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    context = _scoped_context.get()
    if context:
        for key, value in context.items():
            event_dict.setdefault(key, value)
    return event_dict


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask key-like fields and bearer tokens embedded in string values."""
    for key, value in list(event_dict.items()):
        if key.lower() in _SECRET_KEYS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and "Bearer" in value:
            event_dict[key] = _BEARER.sub(rf"\1{REDACTED}", value)
    return event_dict


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
    show_timestamps: bool = True,
    color: bool = True,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to SLOPCOLLECTOR_LOG_LEVEL.
        log_format: "console" or "json". Defaults to SLOPCOLLECTOR_LOG_FORMAT.
        show_timestamps: Prefix console lines with an ISO timestamp
        color: Colorize console output
    """
    if log_level is None or log_format is None:
        from slopcollector.core.config import get_settings

        settings = get_settings()
        log_level = log_level or settings.log_level
        log_format = log_format or settings.log_format

    level = getattr(logging, log_level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _merge_scoped_context,
        structlog.processors.add_log_level,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if show_timestamps or log_format == "json":
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=color,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=cast(TextIO, _CurrentStderr())),
        cache_logger_on_first_use=True,
    )

    # uvicorn and SQLAlchemy log through the stdlib
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(cast(TextIO, _CurrentStderr()))],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    return cast(FilteringBoundLogger, structlog.get_logger(name))


@contextmanager
def log_context(**context: Any) -> Iterator[None]:
    """Attach fields such as project_id or job_id to every event in the block.

    Nested blocks add to the outer context; explicit event fields win.
    """
    current = _scoped_context.get() or {}
    token = _scoped_context.set({**current, **context})
    try:
        yield
    finally:
        _scoped_context.reset(token)


configure_logging()
