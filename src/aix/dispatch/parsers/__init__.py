"""Per-dialect reply parsers emitting normalized particles."""

from __future__ import annotations

from typing import Protocol

from aix.dispatch.transmitter import ParticleTransmitter

from .anthropic import AnthropicMessageParser, AnthropicMessageParserNS
from .openai import OpenAIChatCompletionsChunkParser, OpenAIChatCompletionsParserNS
from .openai_responses import OpenAIResponseParserNS, OpenAIResponsesEventParser


class ChatGenerateParser(Protocol):
    """One parser instance per dispatch; fed frames, then told the body ended."""

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        ...

    def end(self, transmitter: ParticleTransmitter) -> None:
        ...


__all__ = [
    "ChatGenerateParser",
    "AnthropicMessageParser",
    "AnthropicMessageParserNS",
    "OpenAIChatCompletionsChunkParser",
    "OpenAIChatCompletionsParserNS",
    "OpenAIResponsesEventParser",
    "OpenAIResponseParserNS",
]
