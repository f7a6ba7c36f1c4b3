"""Helpers shared by the per-dialect parsers."""

from __future__ import annotations

import json
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

from aix.dispatch.transmitter import ParticleTransmitter
from aix.errors import FrameParseError
from aix.types import Particle, StopReason, ToolCall, Usage


def load_json_frame(event_data: str) -> dict[str, Any]:
    """Decode one frame payload, which must be a JSON object."""
    try:
        data = json.loads(event_data)
    except json.JSONDecodeError as exc:
        raise FrameParseError(event_data, exc.msg) from exc
    if not isinstance(data, dict):
        raise FrameParseError(event_data, "expected a JSON object")
    return data


# raised while walking a frame that is valid JSON but not the documented shape
FRAME_SHAPE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def frame_shape_error(event_data: str, exc: Exception) -> str:
    return str(FrameParseError(event_data, f"unexpected shape, {type(exc).__name__}: {exc}"))


def vendor_error_message(error: Any) -> str:
    """Best-effort message from the many shapes of vendor ``error`` fields."""
    if isinstance(error, dict):
        message = error.get("message") or error.get("error")
        if isinstance(message, str) and message:
            kind = error.get("type") or error.get("code")
            return f"{kind}: {message}" if isinstance(kind, str) and kind else message
        return json.dumps(error)
    return str(error)


def make_usage(
    input_tokens: Any = None,
    output_tokens: Any = None,
    total_tokens: Any = None,
) -> Usage:
    usage = Usage(
        input_tokens=input_tokens if isinstance(input_tokens, int) else None,
        output_tokens=output_tokens if isinstance(output_tokens, int) else None,
        total_tokens=total_tokens if isinstance(total_tokens, int) else None,
    )
    if usage.total_tokens is None and usage.input_tokens is not None and usage.output_tokens is not None:
        usage.total_tokens = usage.input_tokens + usage.output_tokens
    return usage


def emit_text(transmitter: ParticleTransmitter, text: Any) -> None:
    if isinstance(text, str) and text:
        transmitter.emit(Particle(type="text", text=text))


def emit_error(transmitter: ParticleTransmitter, message: str) -> None:
    transmitter.emit(Particle(type="error", error=message))


def emit_end(
    transmitter: ParticleTransmitter,
    usage: Usage | None,
    stop_reason: StopReason | None,
) -> None:
    if usage is not None:
        transmitter.emit(Particle(type="usage", usage=usage))
    transmitter.emit(Particle(type="end", stop_reason=stop_reason))


@dataclass
class _PendingCall:
    id: str
    name: str
    arguments: str = ""


class ToolCallAccumulator:
    """Collects argument fragments per tool call until the vendor closes it.

    Every fragment is forwarded as a ``tool_call_delta`` particle; the merged
    call is emitted once, as a ``tool_call`` particle, on completion.
    """

    def __init__(self) -> None:
        self._open: dict[Hashable, _PendingCall] = {}
        self.completed = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self._open

    def open_id(self, key: Hashable) -> str | None:
        call = self._open.get(key)
        return call.id if call is not None else None

    def start(
        self,
        transmitter: ParticleTransmitter,
        key: Hashable,
        call_id: str,
        name: str,
        arguments: str = "",
    ) -> None:
        self._open[key] = _PendingCall(id=call_id, name=name, arguments=arguments)
        transmitter.emit(Particle(type="tool_call_delta", tool_call=ToolCall(id=call_id, name=name, arguments=arguments)))

    def append(self, transmitter: ParticleTransmitter, key: Hashable, fragment: str) -> None:
        call = self._open.get(key)
        if call is None or not fragment:
            return
        call.arguments += fragment
        transmitter.emit(Particle(type="tool_call_delta", tool_call=ToolCall(id=call.id, name=call.name, arguments=fragment)))

    def complete(self, transmitter: ParticleTransmitter, key: Hashable, arguments: str | None = None) -> None:
        call = self._open.pop(key, None)
        if call is None:
            return
        merged = arguments if arguments is not None else call.arguments
        self.completed += 1
        transmitter.emit(Particle(type="tool_call", tool_call=ToolCall(id=call.id, name=call.name, arguments=merged or "{}")))

    def complete_all(self, transmitter: ParticleTransmitter) -> None:
        for key in list(self._open):
            self.complete(transmitter, key)


def emit_tool_call(transmitter: ParticleTransmitter, call_id: str, name: str, arguments: str) -> None:
    """Emit a whole tool call the way a stream of one fragment would."""
    accumulator = ToolCallAccumulator()
    accumulator.start(transmitter, call_id, call_id, name, arguments)
    accumulator.complete(transmitter, call_id)
