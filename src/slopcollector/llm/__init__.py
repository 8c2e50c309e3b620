"""LLM configuration, prompts and providers."""

from slopcollector.llm.config import LLMConfig, load_llm_config
from slopcollector.llm.feature import LLMFeature
from slopcollector.llm.prompts import PromptRenderer
from slopcollector.llm.providers import (
    LLMProvider,
    LLMRequest,
    LLMResponse,
    create_provider,
    create_provider_from_config,
)

__all__ = [
    "LLMConfig",
    "LLMFeature",
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "PromptRenderer",
    "create_provider",
    "create_provider_from_config",
    "load_llm_config",
]
