"""LLM optimization advice and suggestion lifecycle."""

from slopcollector.advice.generator import AdviceGenerator, parse_advice, summarize_snapshot
from slopcollector.advice.models import (
    AdviceItem,
    AdviceRunResult,
    CodeReference,
    GeneratedAdvice,
    StoreResult,
    Suggestion,
    SuggestionDraft,
)
from slopcollector.advice.service import AdviceService
from slopcollector.advice.suggestions import (
    list_suggestions,
    store_suggestions,
    to_ui_suggestion,
    update_suggestion_status,
)

__all__ = [
    "AdviceGenerator",
    "AdviceItem",
    "AdviceRunResult",
    "AdviceService",
    "CodeReference",
    "GeneratedAdvice",
    "StoreResult",
    "Suggestion",
    "SuggestionDraft",
    "list_suggestions",
    "parse_advice",
    "store_suggestions",
    "summarize_snapshot",
    "to_ui_suggestion",
    "update_suggestion_status",
]
