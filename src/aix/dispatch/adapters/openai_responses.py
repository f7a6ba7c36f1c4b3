"""Request adapter for the OpenAI Responses wire format."""

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


def aix_to_openai_responses(
    model: AixModel,
    req: ChatGenerateRequest,
    json_output: bool,
    streaming: bool,
) -> dict[str, Any]:
    """Build a ``/v1/responses`` body from the conversation."""
    ensure_capabilities(model, req)

    items: list[dict[str, Any]] = []
    for message in req.messages:
        items.extend(_serialize_message(message))

    payload: dict[str, Any] = {
        "model": model.id,
        "input": items,
        # conversations are replayed in full on each call
        "store": False,
    }

    if req.temperature is not None:
        payload["temperature"] = req.temperature

    max_tokens = max_output_tokens(model, req)
    if max_tokens is not None:
        payload["max_output_tokens"] = max_tokens

    if req.tool_mode != "off" and req.tools:
        payload.update(_serialize_tools(req.tools, req.tool_mode))

    if json_output:
        payload["text"] = {"format": {"type": "json_object"}}

    payload["stream"] = streaming
    return payload


def _serialize_message(message: ChatMessage) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    content: list[dict[str, Any]] = []
    text_type = "output_text" if message.role == "assistant" else "input_text"

    def _flush_content() -> None:
        if content:
            role = "user" if message.role == "tool" else message.role
            items.append({"role": role, "content": list(content)})
            content.clear()

    # parts are visited in order so text and calls interleave as given
    for part in message.parts:
        if isinstance(part, TextPart):
            content.append({"type": text_type, "text": part.text})
        elif isinstance(part, ImagePart):
            # only user-side content takes input_image
            if message.role not in ("user", "tool"):
                raise part_not_carried(message, part)
            image: dict[str, Any] = {"type": "input_image", "image_url": part.url}
            if part.detail:
                image["detail"] = part.detail
            content.append(image)
        elif isinstance(part, ToolCallPart):
            if message.role != "assistant":
                raise part_not_carried(message, part)
            _flush_content()
            items.append({"type": "function_call", "call_id": part.id, "name": part.name, "arguments": part.arguments})
        elif isinstance(part, ToolResultPart):
            if message.role == "assistant":
                raise part_not_carried(message, part)
            _flush_content()
            items.append({"type": "function_call_output", "call_id": part.id, "output": part.content})
    _flush_content()
    return items


def _serialize_tools(tools: list[ToolDef], tool_mode: ToolMode) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "tools": [
            {
                "type": "function",
                "name": t.name,
                "description": t.description or "",
                "parameters": t.json_schema,
            }
            for t in tools
        ]
    }
    if tool_mode == "auto":
        payload["tool_choice"] = "auto"
    elif tool_mode == "required":
        payload["tool_choice"] = "required"
    return payload
