"""
Chat-completion integration with dataclass-based architecture.

This package provides:
- Type-safe dataclass models for messages, requests and provider config
- A direct httpx client for streaming chat completions (OpenRouter by default)
- Incremental SSE decoding with strict error reporting
- A small, explicit error taxonomy
"""

from __future__ import annotations

from .client import ChatCompletionsClient
from .exceptions import (
    LLMError,
    MalformedFrameError,
    QuotaExceededError,
    StreamingError,
    TransportError,
    UpstreamError,
)
from .models import ChatCompletionRequest, ChatMessage, MessageRole, ProviderConfig

__all__ = [
    # Client
    "ChatCompletionsClient",
    # Core models
    "ChatCompletionRequest",
    "ChatMessage",
    # Exceptions
    "LLMError",
    "MalformedFrameError",
    "MessageRole",
    "ProviderConfig",
    "QuotaExceededError",
    "StreamingError",
    "TransportError",
    "UpstreamError",
]
