"""Helpers shared by the test modules."""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from aix.config import AixSettings
from aix.demuxers import DemuxerFormat, demux
from aix.dispatch.parsers import ChatGenerateParser
from aix.types import Particle


def make_settings(**overrides: Any) -> AixSettings:
    """Settings independent of the environment running the tests."""
    values: dict[str, Any] = {
        "openai_api_key": "sk-test",
        "openai_api_host": "",
        "openai_api_org": "",
        "anthropic_api_key": "ak-test",
        "anthropic_api_host": "",
        "deepseek_api_key": "ds-test",
        "openrouter_api_key": "or-test",
        "localai_api_host": "",
        "localai_api_key": "",
        "ollama_api_host": "",
        "egregore_api_host": "",
        "aix_stream_idle_timeout_s": 5.0,
    }
    values.update(overrides)
    return AixSettings(_env_file=None, **values)


class ListTransmitter:
    """Records every particle, with no terminal filtering."""

    def __init__(self) -> None:
        self.particles: list[Particle] = []

    def emit(self, particle: Particle) -> None:
        self.particles.append(particle)

    @property
    def types(self) -> list[str]:
        return [p.type for p in self.particles]


def sse(*events: dict[str, Any] | str, named: bool = False) -> bytes:
    """Encode payloads as an SSE body; ``named`` adds ``event:`` lines from ``type``."""
    lines: list[str] = []
    for event in events:
        if isinstance(event, str):
            lines.append(f"data: {event}\n\n")
            continue
        prefix = f"event: {event['type']}\n" if named else ""
        lines.append(f"{prefix}data: {json.dumps(event, ensure_ascii=False)}\n\n")
    return "".join(lines).encode()


async def chunks(*parts: bytes | str) -> AsyncIterator[bytes | str]:
    for part in parts:
        yield part


async def parse_body(
    parser: ChatGenerateParser,
    body: AsyncIterable[bytes | str],
    demuxer_format: DemuxerFormat,
) -> list[Particle]:
    """Run a body through the demuxer and a parser, as the client does."""
    transmitter = ListTransmitter()
    async for frame in demux(body, demuxer_format):
        parser(transmitter, frame.data, frame.event)
    parser.end(transmitter)
    return transmitter.particles


async def collect(stream: AsyncIterable[Particle]) -> list[Particle]:
    return [particle async for particle in stream]
