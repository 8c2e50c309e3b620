"""Anthropic Claude provider."""

from __future__ import annotations

import os

import anthropic

from slopcollector.core.models import Result
from slopcollector.llm.config import ProviderConfig
from slopcollector.llm.providers.base import (
    JSON_ONLY_INSTRUCTION,
    LLMProvider,
    LLMRequest,
    LLMResponse,
)


class AnthropicProvider(LLMProvider):
    """Claude via the sync Anthropic client.

    Claude has no native JSON mode, so JSON requests append an
    instruction to the system prompt.
    """

    def __init__(self, config: ProviderConfig, client: anthropic.Anthropic | None = None):
        self.config = config
        if client is None:
            api_key = os.getenv(config.api_key_env)
            if not api_key:
                raise ValueError(
                    f"Missing environment variable: {config.api_key_env}. "
                    f"Set your Anthropic API key in .env file."
                )
            client = anthropic.Anthropic(api_key=api_key)
        self.client = client

    def complete(self, request: LLMRequest) -> Result[LLMResponse]:
        system = request.system or ""
        if request.response_format == "json":
            system = f"{system}\n\n{JSON_ONLY_INSTRUCTION}".strip()

        try:
            response = self.client.messages.create(
                model=request.model or self.config.default_model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                system=system,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.APIError as e:
            return Result.fail(f"Anthropic API error: {e}")

        content = "".join(block.text for block in response.content if block.type == "text")
        if not content:
            return Result.fail(
                f"No text content in response. Content blocks: {[b.type for b in response.content]}"
            )

        return Result.ok(
            LLMResponse(
                content=content,
                model=response.model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
        )

    def get_model_for_tier(self, tier: str) -> str:
        return self.config.models.get(tier, self.config.default_model)
