"""Request adapter for the Anthropic Messages wire format."""

from __future__ import annotations

import json
from typing import Any

from aix.dispatch.adapters.base import ensure_capabilities, max_output_tokens, part_not_carried, split_data_url
from aix.errors import UnsupportedFeatureError
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

_DEFAULT_MAX_TOKENS = 4096


def aix_to_anthropic_message_create(
    model: AixModel,
    req: ChatGenerateRequest,
    streaming: bool,
) -> dict[str, Any]:
    """Build a ``/v1/messages`` body; system turns move to the ``system`` field."""
    ensure_capabilities(model, req)
    system_text, rest = _split_system(req.messages)

    payload: dict[str, Any] = {
        "model": model.id,
        "max_tokens": max_output_tokens(model, req) or _DEFAULT_MAX_TOKENS,
        "messages": [_serialize_message(m) for m in rest],
    }

    if system_text:
        payload["system"] = system_text
    if req.temperature is not None:
        payload["temperature"] = req.temperature

    if req.tool_mode != "off" and req.tools:
        payload.update(_serialize_tools(req.tools, req.tool_mode))

    payload["stream"] = streaming
    return payload


def _split_system(messages: list[ChatMessage]) -> tuple[str, list[ChatMessage]]:
    system_parts: list[str] = []
    rest: list[ChatMessage] = []
    for m in messages:
        if m.role == "system":
            # the system field is plain text
            for part in m.parts:
                if not isinstance(part, TextPart):
                    raise part_not_carried(m, part)
            system_parts.append(m.text())
        else:
            rest.append(m)
    return ("\n".join(system_parts), rest)


def _serialize_message(message: ChatMessage) -> dict[str, Any]:
    # tool results travel inside a user turn
    role = "user" if message.role == "tool" else message.role
    blocks: list[dict[str, Any]] = []
    for part in message.parts:
        if isinstance(part, TextPart):
            blocks.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            if role != "user":
                raise part_not_carried(message, part)
            blocks.append({"type": "image", "source": _image_source(part)})
        elif isinstance(part, ToolCallPart):
            if role != "assistant":
                raise part_not_carried(message, part)
            blocks.append({"type": "tool_use", "id": part.id, "name": part.name, "input": _tool_input(part)})
        elif isinstance(part, ToolResultPart):
            if role != "user":
                raise part_not_carried(message, part)
            block: dict[str, Any] = {"type": "tool_result", "tool_use_id": part.id, "content": part.content}
            if part.is_error:
                block["is_error"] = True
            blocks.append(block)
    return {"role": role, "content": blocks}


def _image_source(part: ImagePart) -> dict[str, Any]:
    inline = split_data_url(part.url)
    if inline is not None:
        mime_type, data = inline
        return {"type": "base64", "media_type": mime_type, "data": data}
    return {"type": "url", "url": part.url}


def _tool_input(part: ToolCallPart) -> dict[str, Any]:
    try:
        value = json.loads(part.arguments or "{}")
    except json.JSONDecodeError as exc:
        raise UnsupportedFeatureError(f"non-JSON arguments for tool call '{part.id}'") from exc
    if not isinstance(value, dict):
        raise UnsupportedFeatureError(f"non-object arguments for tool call '{part.id}'")
    return value


def _serialize_tools(tools: list[ToolDef], tool_mode: ToolMode) -> dict[str, Any]:
    payload_tools = [
        {
            "name": t.name,
            "description": t.description or "",
            "input_schema": t.json_schema or {"type": "object", "properties": {}},
        }
        for t in tools
    ]
    payload: dict[str, Any] = {"tools": payload_tools}

    if tool_mode == "auto":
        payload["tool_choice"] = {"type": "auto"}
    elif tool_mode == "required":
        payload["tool_choice"] = {"type": "any"}

    return payload
