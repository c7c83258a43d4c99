"""
Streaming-specific dataclasses and the fragment sink contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

DONE_SENTINEL = "[DONE]"
FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"


class DecoderPhase(Enum):
    """Lifecycle of one stream decode."""
    READING = "reading"
    DRAINING = "draining"
    DONE = "done"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (DecoderPhase.DONE, DecoderPhase.ERRORED)


@dataclass
class StreamState:
    """Mutable decoder state for a single request."""
    buffer: str = ""
    accumulated_text: str = ""
    terminated: bool = False
    frames: int = 0
    fragments: int = 0


class FragmentSink(Protocol):
    """Consumer of incremental assistant text and the terminal outcome."""

    def on_fragment(self, fragment: str) -> None: ...

    def on_complete(self, text: str) -> None: ...

    def on_error(self, message: str) -> None: ...
