"""Static registry of the supported model vendors."""

from __future__ import annotations

from aix.vendors.anthropic import AnthropicVendor
from aix.vendors.base import ModelVendor
from aix.vendors.ollama import EgregoreVendor, OllamaVendor
from aix.vendors.openai import DeepseekVendor, LMStudioVendor, LocalAIVendor, OpenAIVendor, OpenRouterVendor

MODEL_VENDOR_REGISTRY: dict[str, ModelVendor] = {
    vendor.id: vendor
    for vendor in (
        LocalAIVendor(),
        AnthropicVendor(),
        DeepseekVendor(),
        EgregoreVendor(),
        LMStudioVendor(),
        OllamaVendor(),
        OpenAIVendor(),
        OpenRouterVendor(),
    )
}


def find_all_model_vendors() -> list[ModelVendor]:
    """All vendors, in display order."""
    return sorted(MODEL_VENDOR_REGISTRY.values(), key=lambda vendor: vendor.display_rank)


def find_model_vendor(vendor_id: str | None) -> ModelVendor | None:
    """Look a vendor up by id; ``None`` means the vendor is not configured."""
    if not vendor_id:
        return None
    return MODEL_VENDOR_REGISTRY.get(vendor_id)
