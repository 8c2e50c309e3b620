"""Shared result type and status enums."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Outcome of a call that is allowed to fail without raising.

    Network reads and LLM calls return this; introspection turns a
    failed Result into "no data" rather than an error.
    """

    success: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """The value, or ValueError carrying the failure message."""
        if not self.success or self.value is None:
            raise ValueError(f"Result failed: {self.error}")
        return self.value

    def value_or(self, default: T | None) -> T | None:
        return self.value if self.success and self.value is not None else default


class SuggestionStatus(str, Enum):
    """Lifecycle state of a stored suggestion."""

    PENDING = "pending"
    APPLIED = "applied"
    DISMISSED = "dismissed"
    ARCHIVED = "archived"


class SuggestionAction(str, Enum):
    """Status-change actions a user can take on a suggestion."""

    APPLY = "apply"
    DISMISS = "dismiss"
    REOPEN = "reopen"
    ARCHIVE = "archive"


class JobStatus(str, Enum):
    """State of an AnalysisJob row."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
