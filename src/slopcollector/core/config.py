"""Settings for storage, introspection, advice and the API server.

Every field reads from a SLOPCOLLECTOR_* environment variable or `.env`.
Provider API keys (ANTHROPIC_API_KEY, OPENAI_API_KEY) are read by the LLM
providers directly and are not fields here.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# src/slopcollector/core/config.py -> repository root
_REPO_ROOT = Path(__file__).resolve().parents[3]


def _default_config_dir() -> Path:
    """The repository's config/ when running from a checkout, else ./config."""
    bundled = _REPO_ROOT / "config"
    return bundled if bundled.is_dir() else Path("config")


class Settings(BaseSettings):
    """Runtime settings, prefix SLOPCOLLECTOR_."""

    model_config = SettingsConfigDict(
        env_prefix="SLOPCOLLECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(
        default=Path("./slopcollector_data"),
        description="Directory holding slopcollector.db",
    )
    config_path: Path = Field(
        default_factory=_default_config_dir,
        description="Directory holding llm.yaml and prompts/",
    )

    http_timeout: float = Field(default=15.0, description="Seconds per PostgREST request")
    sql_rpc_function: str = Field(
        default="exec_sql",
        description="RPC function used for catalog queries",
    )
    default_schema: str = "public"
    introspection_workers: int = Field(default=4, ge=1)

    advice_cooldown_hours: float = Field(default=6.0, ge=0)
    layout_cache_size: int = Field(default=100, ge=1)

    code_scan_max_files: int = Field(default=50, ge=1, description="Files read per code scan")
    github_token: str | None = Field(
        default=None, description="Token for private repositories and higher rate limits"
    )

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    log_level: str = "INFO"
    log_format: str = "console"  # or "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
