"""Anthropic vendor."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx

from aix.access import AnthropicAccess, anthropic_access
from aix.config import AixSettings, get_settings
from aix.fetchers import borrowed_client, fetch_json_or_raise
from aix.types import LLM_IF_OAI_CHAT, LLM_IF_OAI_FN, LLM_IF_OAI_VISION, ModelDescription
from aix.vendors.base import ModelVendor

_CONTEXT_WINDOW = 200_000
_MAX_COMPLETION_TOKENS = 8192


def _epoch(value: Any) -> int | None:
    if not isinstance(value, str):
        return None
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


class AnthropicVendor(ModelVendor):
    id = "anthropic"
    name = "Anthropic"
    display_rank = 13
    location = "cloud"
    has_server_config_key = "has_llm_anthropic"

    def get_transport_access(self, partial_setup: Mapping[str, Any] | None = None) -> AnthropicAccess:
        setup = partial_setup or {}
        return AnthropicAccess(
            anthropic_key=setup.get("anthropic_key") or "",
            anthropic_host=setup.get("anthropic_host") or "",
        )

    async def rpc_update_models(
        self,
        access: AnthropicAccess,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> list[ModelDescription]:
        settings = settings or get_settings()
        transport = anthropic_access(access, "/v1/models", settings)
        async with borrowed_client(client, settings.aix_http_timeout_s) as http:
            data = await fetch_json_or_raise(http, name=self.name, url=transport.url, headers=transport.headers)

        return [
            ModelDescription(
                id=wire["id"],
                label=wire.get("display_name") or wire["id"],
                created=_epoch(wire.get("created_at")),
                context_window=_CONTEXT_WINDOW,
                max_completion_tokens=_MAX_COMPLETION_TOKENS,
                interfaces=[LLM_IF_OAI_CHAT, LLM_IF_OAI_FN, LLM_IF_OAI_VISION],
            )
            for wire in data.get("data") or []
            if isinstance(wire, dict) and wire.get("id")
        ]
