"""OpenAI provider."""

from __future__ import annotations

import os
from typing import Any

import openai

from slopcollector.core.models import Result
from slopcollector.llm.config import ProviderConfig
from slopcollector.llm.providers.base import LLMProvider, LLMRequest, LLMResponse


class OpenAIProvider(LLMProvider):
    """Chat Completions via the sync OpenAI client, with native JSON mode."""

    def __init__(self, config: ProviderConfig, client: openai.OpenAI | None = None):
        self.config = config
        if client is None:
            api_key = os.getenv(config.api_key_env)
            if not api_key:
                raise ValueError(
                    f"Missing environment variable: {config.api_key_env}. "
                    f"Set your OpenAI API key in .env file."
                )
            base_url = os.getenv(config.base_url_env) if config.base_url_env else None
            client = openai.OpenAI(api_key=api_key, base_url=base_url)
        self.client = client

    def complete(self, request: LLMRequest) -> Result[LLMResponse]:
        messages: list[dict[str, str]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        kwargs: dict[str, Any] = {
            "model": request.model or self.config.default_model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": messages,
        }
        if request.response_format == "json":
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            return Result.fail(f"OpenAI API error: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            return Result.fail("No text content in response")

        usage = response.usage
        return Result.ok(
            LLMResponse(
                content=content,
                model=response.model,
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            )
        )

    def get_model_for_tier(self, tier: str) -> str:
        return self.config.models.get(tier, self.config.default_model)
