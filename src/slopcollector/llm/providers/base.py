"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from slopcollector.core.models import Result

JSON_ONLY_INSTRUCTION = (
    "Respond with valid JSON only. "
    "Do not use markdown code blocks or any other formatting. "
    "Your entire response should be parseable as JSON."
)


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    prompt: str
    system: str | None = None
    max_tokens: int = 4000
    temperature: float = 0.0
    response_format: str = "json"  # "json" or "text"
    model: str | None = None


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """Interface every provider implements.

    `complete` reports expected failures (API errors, empty replies)
    through `Result.fail` instead of raising.
    """

    @abstractmethod
    def complete(self, request: LLMRequest) -> Result[LLMResponse]:
        """Send a completion request."""

    @abstractmethod
    def get_model_for_tier(self, tier: str) -> str:
        """Model name for a tier ('fast', 'balanced')."""
