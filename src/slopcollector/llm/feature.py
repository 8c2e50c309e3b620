"""Base class for features that call an LLM with a rendered prompt."""

from __future__ import annotations

from slopcollector.core.logging import get_logger
from slopcollector.core.models import Result
from slopcollector.llm.config import LLMConfig
from slopcollector.llm.prompts import PromptRenderer
from slopcollector.llm.providers.base import LLMProvider, LLMRequest, LLMResponse

logger = get_logger(__name__)


class LLMFeature:
    """Holds the config, provider and prompt renderer a feature needs."""

    def __init__(
        self,
        config: LLMConfig,
        provider: LLMProvider,
        prompt_renderer: PromptRenderer,
    ):
        self.config = config
        self.provider = provider
        self.renderer = prompt_renderer

    def _call_llm(
        self,
        feature_name: str,
        system: str,
        prompt: str,
        temperature: float,
        model_tier: str,
    ) -> Result[LLMResponse]:
        """Send one JSON-mode request to the provider."""
        request = LLMRequest(
            prompt=prompt,
            system=system or None,
            max_tokens=self.config.limits.max_output_tokens_per_request,
            temperature=temperature,
            response_format="json",
            model=self.provider.get_model_for_tier(model_tier),
        )
        result = self.provider.complete(request)
        if result.success and result.value is not None:
            logger.info(
                "llm_call_complete",
                feature=feature_name,
                model=result.value.model,
                input_tokens=result.value.input_tokens,
                output_tokens=result.value.output_tokens,
            )
        else:
            logger.warning("llm_call_failed", feature=feature_name, error=result.error)
        return result
