"""Environment backed defaults for vendor hosts, keys and timeouts."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AixSettings(BaseSettings):
    """Server-side defaults used when an access configuration leaves a field blank."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openai_api_key: str = ""
    openai_api_host: str = ""
    openai_api_org: str = ""
    anthropic_api_key: str = ""
    anthropic_api_host: str = ""
    deepseek_api_key: str = ""
    openrouter_api_key: str = ""
    localai_api_host: str = ""
    localai_api_key: str = ""
    ollama_api_host: str = ""
    egregore_api_host: str = ""

    # sent to OpenRouter for attribution
    aix_app_url: str = "https://localhost"
    aix_app_title: str = "aix"

    aix_http_timeout_s: float = 60.0
    aix_stream_idle_timeout_s: float = 90.0


@lru_cache(maxsize=1)
def get_settings() -> AixSettings:
    """Return the process-wide settings, read once from the environment."""
    return AixSettings()
