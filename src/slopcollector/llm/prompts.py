"""Prompt template loading and rendering.

Templates live in config/prompts/<name>.yaml as a system/user pair with
`{variable}` placeholders (literal braces doubled).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from slopcollector.core.config import get_settings


class PromptTemplate(BaseModel):
    """A prompt template from YAML."""

    name: str
    version: str = "1.0.0"
    description: str = ""
    temperature: float = 0.0
    system_prompt: str = ""
    user_prompt: str
    inputs: dict[str, dict[str, Any]] = Field(default_factory=dict)


class PromptRenderer:
    """Loads templates once and renders them with context variables."""

    def __init__(self, prompts_dir: Path | None = None):
        if prompts_dir is None:
            prompts_dir = get_settings().config_path / "prompts"
        self.prompts_dir = prompts_dir
        self._cache: dict[str, PromptTemplate] = {}

    def load_template(self, name: str) -> PromptTemplate:
        """Load and cache a template by name (file stem).

        Raises:
            FileNotFoundError: If the template file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        path = self.prompts_dir / f"{name}.yaml"
        if not path.exists():
            available = sorted(p.stem for p in self.prompts_dir.glob("*.yaml"))
            raise FileNotFoundError(f"Prompt template not found: {path}. Available: {available}")

        with open(path) as f:
            template = PromptTemplate(**yaml.safe_load(f))

        self._cache[name] = template
        return template

    def render_split(self, name: str, context: dict[str, Any]) -> tuple[str, str, float]:
        """Render a template.

        Returns:
            (system_prompt, user_prompt, temperature)

        Raises:
            ValueError: A required input is missing
            KeyError: The template references an undefined variable
        """
        template = self.load_template(name)
        values = self._prepare_context(template, context)
        return (
            self._render_text(template.system_prompt, values),
            self._render_text(template.user_prompt, values),
            template.temperature,
        )

    def _prepare_context(self, template: PromptTemplate, context: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for input_name, input_spec in template.inputs.items():
            if input_name in context:
                values[input_name] = context[input_name]
            elif "default" in input_spec:
                values[input_name] = input_spec["default"]
            elif input_spec.get("required", False):
                raise ValueError(
                    f"Missing required input '{input_name}' for template '{template.name}'"
                )
        return values

    def _render_text(self, text: str, values: dict[str, Any]) -> str:
        try:
            return text.format(**values)
        except KeyError as e:
            raise KeyError(
                f"Template has undefined variable: {e}. Available context: {list(values)}"
            ) from e

    def clear_cache(self) -> None:
        self._cache.clear()
