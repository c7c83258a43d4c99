"""
Streaming functionality for chat-completion responses.

This package contains:
- Incremental UTF-8 / SSE frame decoding
- Content fragment extraction and accumulation
- The sink contract used to deliver fragments to callers
"""

from __future__ import annotations

from .models import DecoderPhase, FragmentSink, StreamState
from .parser import SSEStreamDecoder, extract_delta_content

__all__ = [
    "DecoderPhase",
    "FragmentSink",
    "SSEStreamDecoder",
    "StreamState",
    "extract_delta_content",
]
