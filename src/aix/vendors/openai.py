"""Vendors speaking the OpenAI protocol: OpenAI itself and compatible services."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

import httpx

from aix.access import OpenAIAccess, OpenAIDialect, openai_access
from aix.config import AixSettings, get_settings
from aix.fetchers import borrowed_client, fetch_json_or_raise
from aix.types import LLM_IF_OAI_CHAT, LLM_IF_OAI_FN, ModelDescription
from aix.vendors.base import ModelVendor


class OpenAIFamilyVendor(ModelVendor):
    """Shared behavior: ``oai_*`` settings and ``GET /v1/models`` listing."""

    id: ClassVar[OpenAIDialect]
    default_interfaces: ClassVar[tuple[str, ...]] = (LLM_IF_OAI_CHAT,)

    def get_transport_access(self, partial_setup: Mapping[str, Any] | None = None) -> OpenAIAccess:
        setup = partial_setup or {}
        return OpenAIAccess(
            dialect=self.id,
            oai_key=setup.get("oai_key") or "",
            oai_org=setup.get("oai_org") or "",
            oai_host=setup.get("oai_host") or "",
        )

    async def rpc_update_models(
        self,
        access: OpenAIAccess,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> list[ModelDescription]:
        settings = settings or get_settings()
        transport = openai_access(access, "/v1/models", settings)
        async with borrowed_client(client, settings.aix_http_timeout_s) as http:
            data = await fetch_json_or_raise(http, name=self.name, url=transport.url, headers=transport.headers)

        models = [
            ModelDescription(
                id=wire["id"],
                label=wire["id"],
                created=wire.get("created"),
                interfaces=list(self.default_interfaces),
            )
            for wire in data.get("data") or []
            if isinstance(wire, dict) and wire.get("id")
        ]
        models.sort(key=lambda m: m.id)
        return models


class OpenAIVendor(OpenAIFamilyVendor):
    id = "openai"
    name = "OpenAI"
    display_rank = 10
    location = "cloud"
    instance_limit = 5
    has_server_config_key = "has_llm_openai"
    default_interfaces = (LLM_IF_OAI_CHAT, LLM_IF_OAI_FN)


class OpenRouterVendor(OpenAIFamilyVendor):
    id = "openrouter"
    name = "OpenRouter"
    display_rank = 40
    location = "cloud"
    has_server_config_key = "has_llm_openrouter"
    default_interfaces = (LLM_IF_OAI_CHAT, LLM_IF_OAI_FN)


class DeepseekVendor(OpenAIFamilyVendor):
    id = "deepseek"
    name = "Deepseek"
    display_rank = 45
    location = "cloud"
    has_server_config_key = "has_llm_deepseek"
    default_interfaces = (LLM_IF_OAI_CHAT, LLM_IF_OAI_FN)


class LocalAIVendor(OpenAIFamilyVendor):
    id = "localai"
    name = "LocalAI"
    display_rank = 50
    location = "local"
    has_server_config_key = "has_llm_localai_host"


class LMStudioVendor(OpenAIFamilyVendor):
    id = "lmstudio"
    name = "LM Studio"
    display_rank = 52
    location = "local"
