"""Checks and helpers shared by the request adapters."""

from __future__ import annotations

import re

from aix.errors import ToolNotAvailableError, UnsupportedFeatureError
from aix.types import AixModel, ChatGenerateRequest, ChatMessage, ContentPart, ImagePart

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def ensure_capabilities(model: AixModel, req: ChatGenerateRequest) -> None:
    """Fail fast if the request asks for something the model cannot do."""

    if req.tool_mode != "off" and req.tools and not model.supports_tools:
        raise ToolNotAvailableError(model.id, [tool.name for tool in req.tools])

    if req.tool_mode == "required" and not req.tools:
        raise UnsupportedFeatureError("required tool use without tools", model.id)

    if not model.supports_vision:
        for message in req.messages:
            if any(isinstance(part, ImagePart) for part in message.parts):
                raise UnsupportedFeatureError("vision", model.id)


def part_not_carried(message: ChatMessage, part: ContentPart) -> UnsupportedFeatureError:
    """Error for a part the vendor turn shape has no room for."""
    return UnsupportedFeatureError(f"{part.type} part in a {message.role} turn")


def max_output_tokens(model: AixModel, req: ChatGenerateRequest) -> int | None:
    """Requested output budget, capped by the model limit when it is known."""
    if req.max_tokens is None:
        return model.max_completion_tokens
    if model.max_completion_tokens is not None:
        return min(req.max_tokens, model.max_completion_tokens)
    return req.max_tokens


def split_data_url(url: str) -> tuple[str, str] | None:
    """Return ``(mime_type, base64_data)`` for a base64 data URL, else None."""
    match = _DATA_URL.match(url)
    if match is None:
        return None
    return match.group("mime"), match.group("data")
