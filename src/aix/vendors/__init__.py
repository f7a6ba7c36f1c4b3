"""Vendor definitions for aix."""

from .anthropic import AnthropicVendor
from .base import ModelVendor
from .ollama import EgregoreVendor, OllamaVendor
from .openai import DeepseekVendor, LMStudioVendor, LocalAIVendor, OpenAIVendor, OpenRouterVendor
from .registry import MODEL_VENDOR_REGISTRY, find_all_model_vendors, find_model_vendor

__all__ = [
    "ModelVendor",
    "AnthropicVendor",
    "DeepseekVendor",
    "EgregoreVendor",
    "LMStudioVendor",
    "LocalAIVendor",
    "OllamaVendor",
    "OpenAIVendor",
    "OpenRouterVendor",
    "MODEL_VENDOR_REGISTRY",
    "find_all_model_vendors",
    "find_model_vendor",
]
