"""The sink parsers emit particles into, and helpers over particle sequences."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from aix.types import Particle, ToolCall

_logger = logging.getLogger(__name__)


@runtime_checkable
class ParticleTransmitter(Protocol):
    """Receives particles synchronously, in generation order."""

    def emit(self, particle: Particle) -> None:
        ...


class ParticleBuffer:
    """Transmitter collecting particles until the consumer drains them.

    Once a terminal particle (``end`` or ``error``) has been accepted every
    later particle is dropped, so a dispatch never reports two outcomes.
    """

    def __init__(self) -> None:
        self._pending: list[Particle] = []
        self.terminal: Particle | None = None

    @property
    def terminated(self) -> bool:
        return self.terminal is not None

    def emit(self, particle: Particle) -> None:
        if self.terminal is not None:
            _logger.debug("Dropping %s particle after %s", particle.type, self.terminal.type)
            return
        self._pending.append(particle)
        if particle.is_terminal:
            self.terminal = particle

    def drain(self) -> list[Particle]:
        """Return and forget the particles emitted since the last drain."""
        pending, self._pending = self._pending, []
        return pending


def coalesce_particles(particles: Iterable[Particle]) -> list[Particle]:
    """Merge adjacent text deltas and adjacent deltas of the same tool call.

    Two particle sequences describing the same generation compare equal once
    coalesced, however the vendor chunked the output.
    """
    merged: list[Particle] = []
    for particle in particles:
        last = merged[-1] if merged else None
        if last is not None and particle.type == last.type == "text":
            merged[-1] = last.model_copy(update={"text": (last.text or "") + (particle.text or "")})
            continue
        if (
            last is not None
            and particle.type == last.type == "tool_call_delta"
            and particle.tool_call is not None
            and last.tool_call is not None
            and particle.tool_call.id == last.tool_call.id
        ):
            call = ToolCall(
                id=last.tool_call.id,
                name=last.tool_call.name or particle.tool_call.name,
                arguments=last.tool_call.arguments + particle.tool_call.arguments,
            )
            merged[-1] = last.model_copy(update={"tool_call": call})
            continue
        merged.append(particle)
    return merged
