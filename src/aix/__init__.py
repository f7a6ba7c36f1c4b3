"""Multi-vendor LLM chat generation: dispatch, streaming and normalization."""

from aix.access import AnthropicAccess, EgregoreAccess, OllamaAccess, OpenAIAccess
from aix.client import AixClient, ChatGenerateResult
from aix.dispatch import create_chat_generate_dispatch
from aix.types import AixModel, ChatGenerateRequest, ChatMessage, Particle, ToolDef

__all__ = [
    "AixClient",
    "AixModel",
    "AnthropicAccess",
    "ChatGenerateRequest",
    "ChatGenerateResult",
    "ChatMessage",
    "EgregoreAccess",
    "OllamaAccess",
    "OpenAIAccess",
    "Particle",
    "ToolDef",
    "create_chat_generate_dispatch",
]
