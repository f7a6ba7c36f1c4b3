"""Parsers for the OpenAI Responses API, event stream and whole response."""

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

_INCOMPLETE_REASONS: dict[str, StopReason] = {
    "max_output_tokens": "max_tokens",
    "content_filter": "filtered",
}


def _usage(response: dict[str, Any]) -> Usage | None:
    usage = response.get("usage")
    if not isinstance(usage, dict):
        return None
    return make_usage(usage.get("input_tokens"), usage.get("output_tokens"), usage.get("total_tokens"))


def _stop_reason(response: dict[str, Any], has_tool_calls: bool) -> StopReason | None:
    status = response.get("status")
    if status == "incomplete":
        details = response.get("incomplete_details") or {}
        return _INCOMPLETE_REASONS.get(details.get("reason", ""))
    if status == "completed":
        return "tool_calls" if has_tool_calls else "ok"
    return None


class OpenAIResponsesEventParser:
    """Streaming parser: one typed ``response.*`` event per frame."""

    def __init__(self) -> None:
        self._tool_calls = ToolCallAccumulator()
        self._usage: Usage | None = None
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

    def _on_event(self, transmitter: ParticleTransmitter, event: dict[str, Any], event_name: str | None) -> None:
        event_type = event.get("type") or event_name

        if event_type == "response.output_text.delta":
            emit_text(transmitter, event.get("delta"))

        elif event_type == "response.output_item.added":
            item = event.get("item") or {}
            if item.get("type") == "function_call":
                self._tool_calls.start(
                    transmitter,
                    item.get("id"),
                    item.get("call_id") or item.get("id") or "",
                    item.get("name") or "",
                    item.get("arguments") or "",
                )

        elif event_type == "response.function_call_arguments.delta":
            self._tool_calls.append(transmitter, event.get("item_id"), event.get("delta") or "")

        elif event_type == "response.function_call_arguments.done":
            self._tool_calls.complete(transmitter, event.get("item_id"), event.get("arguments"))

        elif event_type == "response.output_item.done":
            item = event.get("item") or {}
            if item.get("type") == "function_call":
                self._tool_calls.complete(transmitter, item.get("id"), item.get("arguments"))

        elif event_type in ("response.completed", "response.incomplete"):
            response = event.get("response") or {}
            self._usage = _usage(response)
            self._stop_reason = _stop_reason(response, self._tool_calls.completed > 0)

        elif event_type == "response.failed":
            response = event.get("response") or {}
            self._fail(transmitter, vendor_error_message(response.get("error") or "response failed"))

        elif event_type == "error":
            self._fail(transmitter, vendor_error_message(event.get("error") or event))

        else:
            _logger.debug("Ignoring responses event: %s", event_type)

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        self._tool_calls.complete_all(transmitter)
        emit_end(transmitter, self._usage, self._stop_reason)

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Responses stream failed: %s", message)
        self._done = True
        emit_error(transmitter, message)


class OpenAIResponseParserNS:
    """Non-streaming parser: a whole ``response`` object in one call."""

    def __init__(self) -> None:
        self._usage: Usage | None = None
        self._stop_reason: StopReason | None = None
        self._done = False

    def __call__(self, transmitter: ParticleTransmitter, event_data: str, event_name: str | None = None) -> None:
        if self._done:
            return
        try:
            response = load_json_frame(event_data)
        except FrameParseError as exc:
            self._fail(transmitter, str(exc))
            return

        try:
            self._on_response(transmitter, response)
        except FRAME_SHAPE_ERRORS as exc:
            self._fail(transmitter, frame_shape_error(event_data, exc))

    def _on_response(self, transmitter: ParticleTransmitter, response: dict[str, Any]) -> None:
        if response.get("error"):
            self._fail(transmitter, vendor_error_message(response["error"]))
            return

        tool_calls = 0
        for item in response.get("output") or []:
            item_type = item.get("type")
            if item_type == "message":
                for content in item.get("content") or []:
                    if content.get("type") == "output_text":
                        emit_text(transmitter, content.get("text"))
            elif item_type == "function_call":
                tool_calls += 1
                emit_tool_call(
                    transmitter,
                    item.get("call_id") or item.get("id") or "",
                    item.get("name") or "",
                    item.get("arguments") or "",
                )

        self._usage = _usage(response)
        self._stop_reason = _stop_reason(response, tool_calls > 0)

    def end(self, transmitter: ParticleTransmitter) -> None:
        if self._done:
            return
        self._done = True
        emit_end(transmitter, self._usage, self._stop_reason)

    def _fail(self, transmitter: ParticleTransmitter, message: str) -> None:
        _logger.warning("Responses request failed: %s", message)
        self._done = True
        emit_error(transmitter, message)
