"""Parsers for OpenAI Chat Completions replies, chunked and whole."""

from __future__ import annotations

import logging
from typing import Any

from aix.dispatch.parsers.common import (
    FRAME_SHAPE_ERRORS,
    ToolCallAccumulator,
    emit_end,
    emit_error,
    emit_text,
    emit_tool_call,
    frame_shape_error,
    load_json_frame,
    make_usage,
    vendor_error_message,
)
from aix.dispatch.transmitter import ParticleTransmitter
from aix.errors import FrameParseError
from aix.types import StopReason, Usage

_logger = logging.getLogger(__name__)

_FINISH_REASONS: dict[str, StopReason] = {
    "stop": "ok",
    "length": "max_tokens",
    "tool_calls": "tool_calls",
    "function_call": "tool_calls",
    "content_filter": "filtered",
}


def _usage(data: dict[str, Any]) -> Usage | None:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    return make_usage(usage.get("prompt_tokens"), usage.get("completion_tokens"), usage.get("total_tokens"))


class OpenAIChatCompletionsChunkParser:
    """Streaming parser: one ``chat.completion.chunk`` per frame."""

    def __init__(self) -> None:
        self._tool_calls = ToolCallAccumulator()
        self._usage: Usage | None = None
        self._stop_reason: StopReason | None = None
        self._done = False

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        if self._done:
            return
        try:
            chunk = load_json_frame(event_data)
        except FrameParseError as exc:
            self._fail(transmitter, str(exc))
            return

        try:
            self._on_chunk(transmitter, chunk)
        except FRAME_SHAPE_ERRORS as exc:
            self._fail(transmitter, frame_shape_error(event_data, exc))

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        self._tool_calls.complete_all(transmitter)
        emit_end(transmitter, self._usage, self._stop_reason)

    def _on_chunk(self, transmitter: ParticleTransmitter, chunk: dict[str, Any]) -> None:
        if chunk.get("error"):
            self._fail(transmitter, vendor_error_message(chunk["error"]))
            return

        # with stream_options.include_usage the last chunk carries usage and no choices
        usage = _usage(chunk)
        if usage is not None:
            self._usage = usage

        choices = chunk.get("choices") or []
        if not choices:
            return
        choice = choices[0]
        delta = choice.get("delta") or {}

        emit_text(transmitter, delta.get("content"))

        for position, tool_delta in enumerate(delta.get("tool_calls") or []):
            self._on_tool_delta(transmitter, position, tool_delta)

        finish_reason = choice.get("finish_reason")
        if finish_reason:
            self._stop_reason = _FINISH_REASONS.get(finish_reason)
            self._tool_calls.complete_all(transmitter)

    def _on_tool_delta(self, transmitter: ParticleTransmitter, position: int, tool_delta: dict[str, Any]) -> None:
        index = tool_delta.get("index", position)
        function = tool_delta.get("function") or {}
        fragment = function.get("arguments") or ""
        call_id = tool_delta.get("id")

        # some compatible servers send every call at index 0, told apart by id
        if index in self._tool_calls and call_id and call_id != self._tool_calls.open_id(index):
            self._tool_calls.complete(transmitter, index)

        if index not in self._tool_calls:
            self._tool_calls.start(transmitter, index, call_id or f"call_{index}", function.get("name") or "", fragment)
        else:
            self._tool_calls.append(transmitter, index, fragment)

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Chat completions stream failed: %s", message)
        self._done = True
        emit_error(transmitter, message)


class OpenAIChatCompletionsParserNS:
    """Non-streaming parser: the whole ``chat.completion`` body in one call."""

    def __init__(self) -> None:
        self._usage: Usage | None = None
        self._stop_reason: StopReason | None = None
        self._done = False

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        if self._done:
            return
        try:
            body = load_json_frame(event_data)
        except FrameParseError as exc:
            self._fail(transmitter, str(exc))
            return

        try:
            self._on_body(transmitter, body)
        except FRAME_SHAPE_ERRORS as exc:
            self._fail(transmitter, frame_shape_error(event_data, exc))

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        emit_end(transmitter, self._usage, self._stop_reason)

    def _on_body(self, transmitter: ParticleTransmitter, body: dict[str, Any]) -> None:
        if body.get("error"):
            self._fail(transmitter, vendor_error_message(body["error"]))
            return

        choices = body.get("choices") or []
        if choices:
            choice = choices[0]
            message = choice.get("message") or {}
            emit_text(transmitter, message.get("content"))
            for index, tool_call in enumerate(message.get("tool_calls") or []):
                function = tool_call.get("function") or {}
                emit_tool_call(
                    transmitter,
                    tool_call.get("id") or f"call_{index}",
                    function.get("name") or "",
                    function.get("arguments") or "",
                )
            finish_reason = choice.get("finish_reason")
            if finish_reason:
                self._stop_reason = _FINISH_REASONS.get(finish_reason)

        self._usage = _usage(body)

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Chat completions request failed: %s", message)
        self._done = True
        emit_error(transmitter, message)
