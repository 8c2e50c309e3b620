"""Exceptions surfaced to callers.

Introspection failures never reach these: they degrade to empty data.
Persistence and advice failures are raised so the user knows the
action did not take effect.
"""

from __future__ import annotations

from datetime import datetime


class SlopCollectorError(Exception):
    """Base class for all SlopCollector errors."""


class ProjectNotFoundError(SlopCollectorError):
    """Raised when a project id does not exist."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class SnapshotNotFoundError(SlopCollectorError):
    """Raised when a project has no schema snapshot yet."""

    def __init__(self, message: str = "No schema snapshot found. Please sync your project first."):
        super().__init__(message)


class SuggestionNotFoundError(SlopCollectorError):
    """Raised when a suggestion id does not exist."""

    def __init__(self, suggestion_id: str):
        self.suggestion_id = suggestion_id
        super().__init__(f"Suggestion {suggestion_id} not found")


class AdviceCooldownError(SlopCollectorError):
    """Raised when advice was generated within the cooldown window."""

    def __init__(self, last_run_at: datetime, cooldown_hours: float):
        self.last_run_at = last_run_at
        self.cooldown_hours = cooldown_hours
        super().__init__(
            f"Advice was generated recently at {last_run_at:%Y-%m-%d %H:%M:%S} UTC. "
            f"Please wait {cooldown_hours:g} hours between runs."
        )


class AdviceGenerationError(SlopCollectorError):
    """Raised when the LLM call or its output handling fails."""


class PersistenceError(SlopCollectorError):
    """Raised when a database insert or update fails."""


class CodeSourceError(SlopCollectorError):
    """Raised when application code to scan cannot be read."""
