"""Specialization of a chat generation request to the right vendor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from aix.access import (
    AixAccess,
    AnthropicAccess,
    EgregoreAccess,
    OllamaAccess,
    OpenAIAccess,
    anthropic_access,
    egregore_access,
    ollama_access,
    openai_access,
)
from aix.config import AixSettings
from aix.demuxers import DemuxerFormat
from aix.dispatch.adapters import (
    aix_to_anthropic_message_create,
    aix_to_openai_chat_completions,
    aix_to_openai_responses,
)
from aix.dispatch.parsers import (
    AnthropicMessageParser,
    AnthropicMessageParserNS,
    ChatGenerateParser,
    OpenAIChatCompletionsChunkParser,
    OpenAIChatCompletionsParserNS,
    OpenAIResponseParserNS,
    OpenAIResponsesEventParser,
)
from aix.errors import UnsupportedDialectError
from aix.types import AixModel, ChatGenerateRequest

_logger = logging.getLogger(__name__)

_OPENAI_DIALECTS = ("deepseek", "lmstudio", "localai", "openai", "openrouter")


@dataclass(frozen=True)
class WireRequest:
    """What to POST: built fresh for every dispatch and never modified."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatGenerateDispatch:
    request: WireRequest
    demuxer_format: DemuxerFormat
    chat_generate_parse: ChatGenerateParser


def _chat_completions_parser(streaming: bool) -> ChatGenerateParser:
    return OpenAIChatCompletionsChunkParser() if streaming else OpenAIChatCompletionsParserNS()


def create_chat_generate_dispatch(
    access: AixAccess,
    model: AixModel,
    chat_generate: ChatGenerateRequest,
    streaming: bool,
    *,
    settings: AixSettings | None = None,
) -> ChatGenerateDispatch:
    """Pick adapter, endpoint, framing and parser for a dialect.

    Nothing is sent: the returned bundle describes the request for the HTTP
    layer. Ollama and Egregore generate through their OpenAI-compatible
    endpoint, while model listing keeps their own protocol (see ``aix.admin``).
    """
    dialect = access.dialect
    demuxer_format: DemuxerFormat = "fast-sse" if streaming else None

    if dialect == "anthropic" and isinstance(access, AnthropicAccess):
        transport = anthropic_access(access, "/v1/messages", settings)
        body = aix_to_anthropic_message_create(model, chat_generate, streaming)
        parser: ChatGenerateParser = AnthropicMessageParser() if streaming else AnthropicMessageParserNS()

    # Ollama and Egregore use the "ollama" chat dialect rather than "openai": their
    # compatible endpoint only reads max_tokens, and it accepts stream_options
    elif dialect == "egregore" and isinstance(access, EgregoreAccess):
        transport = egregore_access(access, "/v1/chat/completions", settings)
        body = aix_to_openai_chat_completions("ollama", model, chat_generate, access.egregore_json, streaming)
        parser = _chat_completions_parser(streaming)

    elif dialect == "ollama" and isinstance(access, OllamaAccess):
        transport = ollama_access(access, "/v1/chat/completions", settings)
        body = aix_to_openai_chat_completions("ollama", model, chat_generate, access.ollama_json, streaming)
        parser = _chat_completions_parser(streaming)

    elif dialect in _OPENAI_DIALECTS and isinstance(access, OpenAIAccess):
        if model.vnd_oai_responses_api:
            transport = openai_access(access, "/v1/responses", settings)
            body = aix_to_openai_responses(model, chat_generate, False, streaming)
            parser = OpenAIResponsesEventParser() if streaming else OpenAIResponseParserNS()
        else:
            transport = openai_access(access, "/v1/chat/completions", settings)
            body = aix_to_openai_chat_completions(dialect, model, chat_generate, False, streaming)
            parser = _chat_completions_parser(streaming)

    else:
        raise UnsupportedDialectError(str(dialect))

    _logger.debug("Dispatching %s generation for %s to %s", dialect, model.id, transport.url)
    return ChatGenerateDispatch(
        request=WireRequest(url=transport.url, headers=dict(transport.headers), body=body),
        demuxer_format=demuxer_format,
        chat_generate_parse=parser,
    )
