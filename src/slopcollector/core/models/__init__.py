"""Shared base types.

Domain models live in their packages:
- introspection/models.py -> schema snapshot models
- graphs/models.py        -> diagram node/edge models
- advice/models.py        -> advice and suggestion models
"""

from slopcollector.core.models.base import JobStatus, Result, SuggestionAction, SuggestionStatus

__all__ = [
    "JobStatus",
    "Result",
    "SuggestionAction",
    "SuggestionStatus",
]
