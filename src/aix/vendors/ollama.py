"""Vendors running the Ollama protocol: Ollama and the Egregore AI runner."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from aix.access import EgregoreAccess, OllamaAccess
from aix.admin.ollama import OllamaAdmin
from aix.config import AixSettings
from aix.types import ModelDescription
from aix.vendors.base import ModelVendor


class OllamaVendor(ModelVendor):
    id = "ollama"
    name = "Ollama"
    display_rank = 54
    location = "local"
    instance_limit = 2
    has_server_config_key = "has_llm_ollama"

    def get_transport_access(self, partial_setup: Mapping[str, Any] | None = None) -> OllamaAccess:
        setup = partial_setup or {}
        return OllamaAccess(
            ollama_host=setup.get("ollama_host") or "",
            ollama_json=bool(setup.get("ollama_json")),
        )

    async def rpc_update_models(
        self,
        access: OllamaAccess,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> list[ModelDescription]:
        return await OllamaAdmin(access, client=client, settings=settings).list_models()


class EgregoreVendor(ModelVendor):
    id = "egregore"
    name = "Egregore AI Runner"
    display_rank = 55
    location = "local"
    instance_limit = 2
    has_server_config_key = "has_llm_egregore"

    def get_transport_access(self, partial_setup: Mapping[str, Any] | None = None) -> EgregoreAccess:
        setup = partial_setup or {}
        return EgregoreAccess(
            egregore_host=setup.get("egregore_host") or "",
            egregore_json=bool(setup.get("egregore_json")),
        )

    async def rpc_update_models(
        self,
        access: EgregoreAccess,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> list[ModelDescription]:
        return await OllamaAdmin(access, client=client, settings=settings).list_models()
