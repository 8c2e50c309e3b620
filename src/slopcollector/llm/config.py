"""LLM configuration models and loader.

Reads config/llm.yaml: which provider is active, its model tiers, the
advice feature settings and request limits.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from slopcollector.core.config import get_settings


class ProviderConfig(BaseModel):
    """One LLM provider entry."""

    api_key_env: str
    default_model: str
    models: dict[str, str] = Field(default_factory=dict)
    base_url_env: str | None = None


class FeatureConfig(BaseModel):
    enabled: bool = True
    model_tier: str = "balanced"
    prompt_file: str | None = None
    description: str = ""


class LLMFeatures(BaseModel):
    schema_advice: FeatureConfig = Field(
        default_factory=lambda: FeatureConfig(prompt_file="schema_advice")
    )


class LLMLimits(BaseModel):
    """Request size limits."""

    max_output_tokens_per_request: int = 4000
    max_tables_in_prompt: int = 200
    max_columns_per_table: int = 60


class LLMConfig(BaseModel):
    """Complete LLM configuration from llm.yaml."""

    version: str = "1.0.0"
    providers: dict[str, ProviderConfig]
    active_provider: str
    features: LLMFeatures = Field(default_factory=LLMFeatures)
    limits: LLMLimits = Field(default_factory=LLMLimits)

    @property
    def active(self) -> ProviderConfig:
        if self.active_provider not in self.providers:
            raise ValueError(
                f"Active provider '{self.active_provider}' is not configured. "
                f"Configured: {sorted(self.providers)}"
            )
        return self.providers[self.active_provider]


def load_llm_config(config_path: Path | None = None) -> LLMConfig:
    """Load LLM configuration from YAML.

    Args:
        config_path: Path to llm.yaml. Defaults to `<config_path>/llm.yaml`
            from settings.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If it doesn't match the schema
    """
    if config_path is None:
        config_path = get_settings().config_path / "llm.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"LLM config not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return LLMConfig(**data)
