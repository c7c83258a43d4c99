"""
Streaming chat client for the Z Bookstore assistant.

Forwards user questions to an OpenAI-compatible chat-completions endpoint and
delivers the streamed answer fragment by fragment.
"""

from __future__ import annotations

from .chat_service import AssistantTurnSink, ChatSession
from .config import Configuration
from .llm import (
    ChatCompletionRequest,
    ChatCompletionsClient,
    ChatMessage,
    LLMError,
    MalformedFrameError,
    MessageRole,
    ProviderConfig,
    QuotaExceededError,
    TransportError,
    UpstreamError,
)
from .llm.streaming import FragmentSink, SSEStreamDecoder

__all__ = [
    "AssistantTurnSink",
    "ChatCompletionRequest",
    "ChatCompletionsClient",
    "ChatMessage",
    "ChatSession",
    "Configuration",
    "FragmentSink",
    "LLMError",
    "MalformedFrameError",
    "MessageRole",
    "ProviderConfig",
    "QuotaExceededError",
    "SSEStreamDecoder",
    "TransportError",
    "UpstreamError",
]
