"""Access configurations and the builders turning them into URLs and headers.

An access configuration is the per-service connection info stored by the
caller, tagged by ``dialect``. The builders here are the only place where
vendor authentication headers are produced; request adapters never add them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from aix.config import AixSettings, get_settings
from aix.errors import ConfigurationError

OpenAIDialect = Literal["openai", "deepseek", "lmstudio", "localai", "openrouter"]

_ANTHROPIC_API_VERSION = "2023-06-01"

_DEFAULT_ANTHROPIC_HOST = "https://api.anthropic.com"
_DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"
_DEFAULT_EGREGORE_HOST = "http://127.0.0.1:11434"

_DEFAULT_OPENAI_HOSTS: dict[str, str] = {
    "openai": "https://api.openai.com",
    "deepseek": "https://api.deepseek.com",
    "lmstudio": "http://localhost:1234",
    "localai": "http://127.0.0.1:8080",
    "openrouter": "https://openrouter.ai/api",
}


class OpenAIAccess(BaseModel):
    """Access for OpenAI and the vendors speaking its wire protocol."""

    dialect: OpenAIDialect
    oai_key: str = ""
    oai_org: str = ""
    oai_host: str = ""


class AnthropicAccess(BaseModel):
    dialect: Literal["anthropic"] = "anthropic"
    anthropic_key: str = ""
    anthropic_host: str = ""


class OllamaAccess(BaseModel):
    dialect: Literal["ollama"] = "ollama"
    ollama_host: str = ""
    ollama_json: bool = False


class EgregoreAccess(BaseModel):
    dialect: Literal["egregore"] = "egregore"
    egregore_host: str = ""
    egregore_json: bool = False


AixAccess = Annotated[
    OpenAIAccess | AnthropicAccess | OllamaAccess | EgregoreAccess,
    Field(discriminator="dialect"),
]


@dataclass(frozen=True)
class TransportAccess:
    """Resolved endpoint for one API path."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)


def fixup_host(host: str, api_path: str) -> str:
    """Normalize a user supplied host so that ``host + api_path`` is a valid URL."""
    host = host.strip()
    if not host.startswith(("http://", "https://")):
        host = "http://" + host
    host = host.rstrip("/")
    # users often paste the OpenAI-style base URL, which already ends in /v1
    if api_path.startswith("/v1") and host.endswith("/v1"):
        host = host[: -len("/v1")]
    return host


def openai_access(
    access: OpenAIAccess,
    api_path: str,
    settings: AixSettings | None = None,
) -> TransportAccess:
    """Resolve URL and headers for an OpenAI-compatible vendor."""
    settings = settings or get_settings()
    dialect = access.dialect

    key = access.oai_key
    host = access.oai_host
    org = ""
    if dialect == "openai":
        key = key or settings.openai_api_key
        host = host or settings.openai_api_host
        org = access.oai_org or settings.openai_api_org
    elif dialect == "deepseek":
        key = key or settings.deepseek_api_key
    elif dialect == "openrouter":
        key = key or settings.openrouter_api_key
    elif dialect == "localai":
        key = key or settings.localai_api_key
        host = host or settings.localai_api_host

    # hosted vendors need a key unless pointed at a custom (proxy) host
    if not key and not host and dialect in ("openai", "deepseek", "openrouter"):
        raise ConfigurationError(f"{dialect}: missing API key")

    headers = {"Content-Type": "application/json"}
    if key:
        headers["Authorization"] = f"Bearer {key}"
    if org:
        headers["OpenAI-Organization"] = org
    if dialect == "openrouter":
        headers["HTTP-Referer"] = settings.aix_app_url
        headers["X-Title"] = settings.aix_app_title

    base = fixup_host(host or _DEFAULT_OPENAI_HOSTS[dialect], api_path)
    return TransportAccess(url=base + api_path, headers=headers)


def anthropic_access(
    access: AnthropicAccess,
    api_path: str,
    settings: AixSettings | None = None,
) -> TransportAccess:
    """Resolve URL and headers for the Anthropic Messages API."""
    settings = settings or get_settings()
    key = access.anthropic_key or settings.anthropic_api_key
    host = access.anthropic_host or settings.anthropic_api_host
    if not key and not host:
        raise ConfigurationError("anthropic: missing API key")

    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "anthropic-version": _ANTHROPIC_API_VERSION,
    }
    if key:
        headers["x-api-key"] = key

    base = fixup_host(host or _DEFAULT_ANTHROPIC_HOST, api_path)
    return TransportAccess(url=base + api_path, headers=headers)


def ollama_access(
    access: OllamaAccess,
    api_path: str,
    settings: AixSettings | None = None,
) -> TransportAccess:
    settings = settings or get_settings()
    host = access.ollama_host or settings.ollama_api_host or _DEFAULT_OLLAMA_HOST
    return TransportAccess(
        url=fixup_host(host, api_path) + api_path,
        headers={"Content-Type": "application/json"},
    )


def egregore_access(
    access: EgregoreAccess,
    api_path: str,
    settings: AixSettings | None = None,
) -> TransportAccess:
    settings = settings or get_settings()
    host = access.egregore_host or settings.egregore_api_host or _DEFAULT_EGREGORE_HOST
    return TransportAccess(
        url=fixup_host(host, api_path) + api_path,
        headers={"Content-Type": "application/json"},
    )
