"""Translators from the neutral chat request to vendor wire bodies."""

from .anthropic_messages import aix_to_anthropic_message_create
from .base import ensure_capabilities
from .openai_chat_completions import aix_to_openai_chat_completions
from .openai_responses import aix_to_openai_responses

__all__ = [
    "ensure_capabilities",
    "aix_to_anthropic_message_create",
    "aix_to_openai_chat_completions",
    "aix_to_openai_responses",
]
