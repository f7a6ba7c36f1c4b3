"""Parsers for Anthropic Messages replies, event stream and whole message."""

from __future__ import annotations

import json
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

_STOP_REASONS: dict[str, StopReason] = {
    "end_turn": "ok",
    "stop_sequence": "ok",
    "pause_turn": "ok",
    "max_tokens": "max_tokens",
    "tool_use": "tool_calls",
    "refusal": "filtered",
}


def _tool_arguments(value: Any) -> str:
    # keep non-ASCII as is, the way streamed partial_json arrives
    return json.dumps(value, ensure_ascii=False)


class AnthropicMessageParser:
    """Streaming parser for the ``message_start`` .. ``message_stop`` events."""

    def __init__(self) -> None:
        self._tool_calls = ToolCallAccumulator()
        self._input_tokens: int | None = None
        self._output_tokens: int | None = None
        self._stop_reason: StopReason | None = None
        self._done = False

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        if self._done:
            return
        try:
            event = load_json_frame(event_data)
        except FrameParseError as exc:
            self._fail(transmitter, str(exc))
            return

        try:
            self._on_event(transmitter, event, event_name)
        except FRAME_SHAPE_ERRORS as exc:
            self._fail(transmitter, frame_shape_error(event_data, exc))

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        self._tool_calls.complete_all(transmitter)
        usage = None
        if self._input_tokens is not None or self._output_tokens is not None:
            usage = make_usage(self._input_tokens, self._output_tokens)
        emit_end(transmitter, usage, self._stop_reason)

    def _on_event(self, transmitter: ParticleTransmitter, event: dict[str, Any], event_name: str | None) -> None:
        event_type = event.get("type") or event_name

        if event_type == "message_start":
            usage = (event.get("message") or {}).get("usage") or {}
            self._input_tokens = usage.get("input_tokens")
            self._output_tokens = usage.get("output_tokens")

        elif event_type == "content_block_start":
            block = event.get("content_block") or {}
            if block.get("type") == "text":
                emit_text(transmitter, block.get("text"))
            elif block.get("type") == "tool_use":
                initial = block.get("input")
                # streamed input arrives as partial_json; a non-empty start input is already whole
                arguments = _tool_arguments(initial) if initial else ""
                self._tool_calls.start(transmitter, event.get("index"), block.get("id") or "", block.get("name") or "", arguments)

        elif event_type == "content_block_delta":
            delta = event.get("delta") or {}
            if delta.get("type") == "text_delta":
                emit_text(transmitter, delta.get("text"))
            elif delta.get("type") == "input_json_delta":
                self._tool_calls.append(transmitter, event.get("index"), delta.get("partial_json") or "")

        elif event_type == "content_block_stop":
            self._tool_calls.complete(transmitter, event.get("index"))

        elif event_type == "message_delta":
            delta = event.get("delta") or {}
            if delta.get("stop_reason"):
                self._stop_reason = _STOP_REASONS.get(delta["stop_reason"])
            usage = event.get("usage") or {}
            if "output_tokens" in usage:
                self._output_tokens = usage["output_tokens"]

        elif event_type == "error":
            self._fail(transmitter, vendor_error_message(event.get("error") or event))

        elif event_type not in ("message_stop", "ping"):
            _logger.debug("Ignoring anthropic event: %s", event_type)

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Anthropic stream failed: %s", message)
        self._done = True
        emit_error(transmitter, message)


class AnthropicMessageParserNS:
    """Non-streaming parser for a whole ``message`` body."""

    def __init__(self) -> None:
        self._usage: Usage | None = None
        self._stop_reason: StopReason | None = None
        self._done = False

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        if self._done:
            return
        try:
            message = load_json_frame(event_data)
        except FrameParseError as exc:
            self._fail(transmitter, str(exc))
            return

        try:
            self._on_message(transmitter, message)
        except FRAME_SHAPE_ERRORS as exc:
            self._fail(transmitter, frame_shape_error(event_data, exc))

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        emit_end(transmitter, self._usage, self._stop_reason)

    def _on_message(self, transmitter: ParticleTransmitter, message: dict[str, Any]) -> None:
        if message.get("type") == "error" or message.get("error"):
            self._fail(transmitter, vendor_error_message(message.get("error") or message))
            return

        for block in message.get("content") or []:
            block_type = block.get("type")
            if block_type == "text":
                emit_text(transmitter, block.get("text"))
            elif block_type == "tool_use":
                emit_tool_call(
                    transmitter,
                    block.get("id") or "",
                    block.get("name") or "",
                    _tool_arguments(block.get("input") or {}),
                )

        usage: dict[str, Any] = message.get("usage") or {}
        if usage:
            self._usage = make_usage(usage.get("input_tokens"), usage.get("output_tokens"))
        if message.get("stop_reason"):
            self._stop_reason = _STOP_REASONS.get(message["stop_reason"])

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Anthropic request failed: %s", message)
        self._done = True
        emit_error(transmitter, message)
