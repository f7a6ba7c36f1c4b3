"""Async client executing chat generation dispatches over HTTP."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import BaseModel, Field

from aix.access import AixAccess
from aix.config import AixSettings, get_settings
from aix.demuxers import DemuxedEvent, demux
from aix.dispatch.chat_generate import ChatGenerateDispatch, create_chat_generate_dispatch
from aix.dispatch.transmitter import ParticleBuffer, coalesce_particles
from aix.errors import ProviderError
from aix.fetchers import raise_for_status
from aix.types import AixModel, ChatGenerateRequest, Particle, StopReason, ToolCall, Usage


class ChatGenerateResult(BaseModel):
    """A whole generation, folded from its particles."""

    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    usage: Usage | None = None
    stop_reason: StopReason | None = None


async def _next_frame(frames: AsyncIterator[DemuxedEvent]) -> DemuxedEvent | None:
    try:
        return await frames.__anext__()
    except StopAsyncIteration:
        return None


class AixClient:
    """Runs chat generations against any configured vendor.

    Access configuration and model are passed on every call; the client only
    owns the HTTP connection pool and the timeouts.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
        timeout_s: float | None = None,
        stream_idle_timeout_s: float | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s or self._settings.aix_http_timeout_s)
        self._idle_timeout_s = (
            stream_idle_timeout_s if stream_idle_timeout_s is not None else self._settings.aix_stream_idle_timeout_s
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client, if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def stream(
        self,
        access: AixAccess,
        model: AixModel,
        req: ChatGenerateRequest,
    ) -> AsyncIterator[Particle]:
        """Stream particles for a chat request.

        The dispatch is resolved right away, so configuration and adapter
        errors raise here, before any network traffic. Closing the returned
        iterator (or cancelling its consumer) aborts the HTTP exchange.
        """
        dispatch = create_chat_generate_dispatch(access, model, req, True, settings=self._settings)
        return self._execute(access.dialect, dispatch)

    async def generate(
        self,
        access: AixAccess,
        model: AixModel,
        req: ChatGenerateRequest,
        *,
        streaming: bool = False,
    ) -> ChatGenerateResult:
        """Run a chat request to completion and fold the particles."""
        dispatch = create_chat_generate_dispatch(access, model, req, streaming, settings=self._settings)
        particles = [particle async for particle in self._execute(access.dialect, dispatch)]

        result = ChatGenerateResult()
        for particle in coalesce_particles(particles):
            if particle.type == "text":
                result.text += particle.text or ""
            elif particle.type == "tool_call" and particle.tool_call is not None:
                result.tool_calls.append(particle.tool_call)
            elif particle.type == "usage":
                result.usage = particle.usage
            elif particle.type == "end":
                result.stop_reason = particle.stop_reason
            elif particle.type == "error":
                raise ProviderError(access.dialect, particle.error or "generation failed")
        return result

    async def _execute(self, name: str, dispatch: ChatGenerateDispatch) -> AsyncIterator[Particle]:
        request = dispatch.request
        parse = dispatch.chat_generate_parse
        transmitter = ParticleBuffer()
        # a whole-body read is bounded by the HTTP timeout alone
        idle_timeout_s = self._idle_timeout_s if dispatch.demuxer_format is not None else None

        try:
            async with self._client.stream("POST", request.url, headers=request.headers, json=request.body) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    raise_for_status(name, response, body.decode(errors="replace"))

                frames = demux(response.aiter_bytes(), dispatch.demuxer_format)
                try:
                    while not transmitter.terminated:
                        try:
                            frame = await asyncio.wait_for(_next_frame(frames), idle_timeout_s)
                        except asyncio.TimeoutError:
                            self._logger.warning("%s: no data for %ss, closing stream", name, idle_timeout_s)
                            transmitter.emit(Particle(type="error", error=f"stream idle for {idle_timeout_s}s"))
                        except httpx.TimeoutException as exc:
                            self._logger.warning("%s: read timeout: %s", name, exc)
                            transmitter.emit(Particle(type="error", error=f"read timeout: {exc}"))
                        else:
                            if frame is None:
                                parse.end(transmitter)
                            else:
                                parse(transmitter, frame.data, frame.event)

                        for particle in transmitter.drain():
                            yield particle
                finally:
                    await frames.aclose()
        except httpx.HTTPError as exc:
            raise ProviderError(name, f"{type(exc).__name__}: {exc}") from exc
