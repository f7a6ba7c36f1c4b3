"""Request adapter for the OpenAI Chat Completions wire format."""

from __future__ import annotations

from typing import Any

from aix.dispatch.adapters.base import ensure_capabilities, max_output_tokens, part_not_carried
from aix.types import (
    AixModel,
    ChatGenerateRequest,
    ChatMessage,
    ImagePart,
    TextPart,
    ToolCallPart,
    ToolDef,
    ToolMode,
    ToolResultPart,
)

# dialects known to accept stream_options.include_usage
_STREAM_USAGE_DIALECTS = ("openai", "deepseek", "openrouter", "ollama")


def aix_to_openai_chat_completions(
    dialect: str,
    model: AixModel,
    req: ChatGenerateRequest,
    json_output: bool,
    streaming: bool,
) -> dict[str, Any]:
    """Build a ``/v1/chat/completions`` body.

    ``dialect`` selects the small differences between OpenAI-compatible
    servers; ``json_output`` asks the server for a JSON object reply.
    """
    ensure_capabilities(model, req)

    messages: list[dict[str, Any]] = []
    for message in req.messages:
        messages.extend(_serialize_message(message))

    payload: dict[str, Any] = {
        "model": model.id,
        "messages": messages,
    }

    if req.temperature is not None:
        payload["temperature"] = req.temperature

    max_tokens = max_output_tokens(model, req)
    if max_tokens is not None:
        # OpenAI deprecated max_tokens, compatible servers mostly only know the old name
        payload["max_completion_tokens" if dialect == "openai" else "max_tokens"] = max_tokens

    if req.tool_mode != "off" and req.tools:
        payload.update(_serialize_tools(req.tools, req.tool_mode))

    if json_output:
        payload["response_format"] = {"type": "json_object"}

    payload["stream"] = streaming
    if streaming and dialect in _STREAM_USAGE_DIALECTS:
        payload["stream_options"] = {"include_usage": True}

    return payload


def _serialize_message(message: ChatMessage) -> list[dict[str, Any]]:
    results = [p for p in message.parts if isinstance(p, ToolResultPart)]
    if results or message.role == "tool":
        # "tool" messages carry a single result and nothing else
        for part in message.parts:
            if not isinstance(part, ToolResultPart):
                raise part_not_carried(message, part)
        return [{"role": "tool", "tool_call_id": r.id, "content": r.content} for r in results]

    for part in message.parts:
        if isinstance(part, ToolCallPart) and message.role != "assistant":
            raise part_not_carried(message, part)
        if isinstance(part, ImagePart) and message.role != "user":
            raise part_not_carried(message, part)

    if message.role == "assistant":
        calls = [p for p in message.parts if isinstance(p, ToolCallPart)]
        serialized: dict[str, Any] = {"role": "assistant", "content": message.text() or None}
        if calls:
            serialized["tool_calls"] = [
                {
                    "id": c.id,
                    "type": "function",
                    "function": {"name": c.name, "arguments": c.arguments},
                }
                for c in calls
            ]
        return [serialized]

    if any(isinstance(p, ImagePart) for p in message.parts):
        content: list[dict[str, Any]] = []
        for part in message.parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                image_url: dict[str, Any] = {"url": part.url}
                if part.detail:
                    image_url["detail"] = part.detail
                content.append({"type": "image_url", "image_url": image_url})
        return [{"role": message.role, "content": content}]

    return [{"role": message.role, "content": message.text()}]


def _serialize_tools(tools: list[ToolDef], tool_mode: ToolMode) -> dict[str, Any]:
    tool_payload = [
        {
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description or "",
                "parameters": t.json_schema,
            },
        }
        for t in tools
    ]

    payload: dict[str, Any] = {"tools": tool_payload}

    if tool_mode == "auto":
        payload["tool_choice"] = "auto"
    elif tool_mode == "required":
        payload["tool_choice"] = "required"

    return payload
