"""Slicing of HTTP response bodies into discrete event frames."""

from __future__ import annotations

import codecs
import logging
import re
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from typing import Literal, Optional

DemuxerFormat = Optional[Literal["fast-sse", "json-nl"]]

_SSE_DONE = "[DONE]"
_LINE_END = re.compile(r"\r\n|\r|\n")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemuxedEvent:
    """One framed event: the payload plus the SSE event name, if any."""

    data: str
    event: str | None = None


class FastSSEDemuxer:
    """Incremental server-sent-events parser.

    Frames end on a blank line, ``event:`` names the frame and ``data:`` lines
    are joined with newlines. A ``[DONE]`` payload marks the end of the stream.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._event: str | None = None
        self._data: list[str] = []
        self.done = False

    def feed(self, text: str) -> list[DemuxedEvent]:
        """Consume a chunk of text and return the frames it completed."""
        if self.done:
            return []
        self._buffer += text
        frames: list[DemuxedEvent] = []
        while not self.done:
            match = _LINE_END.search(self._buffer)
            if match is None:
                break
            # a lone trailing \r may be the first half of \r\n
            if match.group() == "\r" and match.end() == len(self._buffer):
                break
            line = self._buffer[: match.start()]
            self._buffer = self._buffer[match.end() :]
            frame = self._process_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> list[DemuxedEvent]:
        """Emit a final frame left unterminated when the body ended."""
        if self.done:
            return []
        if self._buffer:
            line, self._buffer = self._buffer.rstrip("\r"), ""
            self._process_line(line)
        frame = self._dispatch()
        return [frame] if frame is not None else []

    def _process_line(self, line: str) -> DemuxedEvent | None:
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name not in ("id", "retry"):
            _logger.debug("Ignoring SSE field: %s", name)
        return None

    def _dispatch(self) -> DemuxedEvent | None:
        data, event = self._data, self._event
        self._data, self._event = [], None
        if not data:
            return None
        payload = "\n".join(data)
        if payload.strip() == _SSE_DONE:
            self.done = True
            return None
        return DemuxedEvent(data=payload, event=event or None)


class JsonNLDemuxer:
    """Newline-delimited JSON: every non-empty line is one frame."""

    def __init__(self) -> None:
        self._buffer = ""
        self.done = False

    def feed(self, text: str) -> list[DemuxedEvent]:
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return [DemuxedEvent(data=line.strip()) for line in lines if line.strip()]

    def flush(self) -> list[DemuxedEvent]:
        line, self._buffer = self._buffer.strip(), ""
        return [DemuxedEvent(data=line)] if line else []


def create_demuxer(demuxer_format: DemuxerFormat) -> FastSSEDemuxer | JsonNLDemuxer:
    """Return a fresh incremental demuxer for a framing format."""
    if demuxer_format == "fast-sse":
        return FastSSEDemuxer()
    if demuxer_format == "json-nl":
        return JsonNLDemuxer()
    raise ValueError(f"No incremental demuxer for format {demuxer_format!r}")


async def demux(
    chunks: AsyncIterable[bytes | str],
    demuxer_format: DemuxerFormat,
) -> AsyncIterator[DemuxedEvent]:
    """Yield frames from a chunked body, one at a time.

    Network data is only pulled when the consumer asks for the next frame.
    With no framing (``None``) the whole body is yielded as a single frame
    once it has been fully received.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()

    def _text(chunk: bytes | str) -> str:
        return chunk if isinstance(chunk, str) else decoder.decode(chunk)

    if demuxer_format is None:
        parts = [_text(chunk) async for chunk in chunks]
        parts.append(decoder.decode(b"", final=True))
        yield DemuxedEvent(data="".join(parts))
        return

    demuxer = create_demuxer(demuxer_format)
    async for chunk in chunks:
        for frame in demuxer.feed(_text(chunk)):
            yield frame
        if demuxer.done:
            return

    for frame in demuxer.feed(decoder.decode(b"", final=True)):
        yield frame
    for frame in demuxer.flush():
        yield frame
