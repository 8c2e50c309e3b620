"""LLM provider implementations and factory."""

from __future__ import annotations

from typing import Any

from slopcollector.llm.config import LLMConfig, ProviderConfig
from slopcollector.llm.providers.base import LLMProvider, LLMRequest, LLMResponse

__all__ = [
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "create_provider",
    "create_provider_from_config",
]


def create_provider(provider_name: str, provider_config: dict[str, Any]) -> LLMProvider:
    """Create an LLM provider by name.

    Args:
        provider_name: 'anthropic' or 'openai'
        provider_config: Provider-specific configuration dict

    Raises:
        ValueError: Unknown provider or missing API key
    """
    config = ProviderConfig(**provider_config)

    if provider_name == "anthropic":
        from slopcollector.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(config)

    elif provider_name == "openai":
        from slopcollector.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(config)

    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. Supported providers: anthropic, openai"
        )


def create_provider_from_config(config: LLMConfig) -> LLMProvider:
    return create_provider(config.active_provider, config.active.model_dump())
