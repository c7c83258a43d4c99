"""
Incremental SSE decoder for chat-completion streams.

Bytes arrive in arbitrary chunks: a frame, a line, or a multi-byte UTF-8
character may be split across any boundary. The decoder carries partial input
over between chunks and emits content fragments strictly in stream order.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import AsyncGenerator, AsyncIterable, Iterator
from typing import Any

import structlog

from ..exceptions import MalformedFrameError
from .models import (
    DATA_PREFIX,
    DONE_SENTINEL,
    FRAME_DELIMITER,
    DecoderPhase,
    FragmentSink,
    StreamState,
)

logger = structlog.get_logger(__name__)


class SSEStreamDecoder:
    """Turns a raw byte stream into ordered assistant text fragments.

    One instance decodes exactly one response body. ``feed`` and ``finish``
    are generators and must be exhausted for state to advance.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.state = StreamState()
        self.phase = DecoderPhase.READING
        self._decoder = codecs.getincrementaldecoder(encoding)()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict[str, int]:
        return {
            'total_chunks': 0,
            'data_lines': 0,
            'ignored_lines': 0,
            'empty_deltas': 0,
        }

    @property
    def accumulated_text(self) -> str:
        return self.state.accumulated_text

    def feed(self, data: bytes) -> Iterator[str]:
        """Decode one chunk and yield fragments from every completed frame."""
        if self.phase.is_terminal:
            return
        text = self._decode(data, final=False)
        yield from self._drain_frames(text)

    def finish(self) -> Iterator[str]:
        """Flush the byte decoder once the body has ended without a sentinel."""
        if self.phase.is_terminal:
            return
        self.phase = DecoderPhase.DRAINING
        text = self._decode(b"", final=True)
        yield from self._drain_frames(text)

        if self.phase is DecoderPhase.DRAINING:
            if self.state.buffer.strip():
                logger.debug(
                    "Discarding incomplete trailing frame",
                    buffered_chars=len(self.state.buffer),
                )
            self.state.buffer = ""
            self.phase = DecoderPhase.DONE

    async def iter_fragments(
        self, byte_stream: AsyncIterable[bytes]
    ) -> AsyncGenerator[str]:
        """Read chunks until the sentinel, end of data, or a fatal error."""
        async for chunk in byte_stream:
            self.stats['total_chunks'] += 1
            for fragment in self.feed(chunk):
                yield fragment
            if self.state.terminated:
                return

        for fragment in self.finish():
            yield fragment

    async def decode(
        self,
        byte_stream: AsyncIterable[bytes],
        sink: FragmentSink | None = None,
    ) -> str:
        """Drive the stream to completion, pushing fragments to ``sink``."""
        async for fragment in self.iter_fragments(byte_stream):
            if sink is not None:
                sink.on_fragment(fragment)

        logger.debug(
            "Stream decoded",
            terminated=self.state.terminated,
            frames=self.state.frames,
            fragments=self.state.fragments,
        )
        return self.state.accumulated_text

    def _decode(self, data: bytes, *, final: bool) -> str:
        try:
            return self._decoder.decode(data, final)
        except UnicodeDecodeError as e:
            self.phase = DecoderPhase.ERRORED
            raise MalformedFrameError(
                f"Invalid {self.encoding} in stream: {e}"
            ) from e

    def _drain_frames(self, text: str) -> Iterator[str]:
        buffer = (self.state.buffer + text).replace("\r\n", "\n")
        *frames, self.state.buffer = buffer.split(FRAME_DELIMITER)

        for frame in frames:
            self.state.frames += 1
            yield from self._parse_frame(frame)
            if self.state.terminated:
                return

    def _parse_frame(self, frame: str) -> Iterator[str]:
        for line in frame.split("\n"):
            if not line.startswith(DATA_PREFIX):
                if line:
                    self.stats['ignored_lines'] += 1
                continue

            payload = line[len(DATA_PREFIX):]
            if payload.startswith(" "):
                payload = payload[1:]
            payload = payload.strip()
            self.stats['data_lines'] += 1

            if payload == DONE_SENTINEL:
                self.state.terminated = True
                self.phase = DecoderPhase.DONE
                return

            fragment = self._parse_payload(payload)
            if not fragment:
                self.stats['empty_deltas'] += 1
                continue

            self.state.accumulated_text += fragment
            self.state.fragments += 1
            yield fragment

    def _parse_payload(self, payload: str) -> str:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            self.phase = DecoderPhase.ERRORED
            raise MalformedFrameError(
                f"Invalid JSON in stream frame: {e}", payload=payload
            ) from e
        return extract_delta_content(data)

    def get_stats(self) -> dict[str, int]:
        """Get streaming statistics for monitoring."""
        return self.stats.copy()

    def reset(self) -> None:
        """Reset decoder state for a new stream."""
        self.state = StreamState()
        self.phase = DecoderPhase.READING
        self._decoder = codecs.getincrementaldecoder(self.encoding)()
        self.stats = self._empty_stats()


def extract_delta_content(data: Any) -> str:
    """Return ``choices[0].delta.content`` or "" when any segment is missing."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    choice = choices[0]
    if not isinstance(choice, dict):
        return ""
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""
