"""Core infrastructure: configuration, logging, connections and shared types."""

from slopcollector.core.connections import (
    ConnectionConfig,
    ConnectionManager,
    close_default_manager,
    get_connection_manager,
)
from slopcollector.core.models.base import Result

__all__ = [
    "ConnectionConfig",
    "ConnectionManager",
    "Result",
    "close_default_manager",
    "get_connection_manager",
]
