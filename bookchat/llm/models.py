"""
Core chat-completion dataclasses.

This module provides the request-side building blocks:
- Message roles and chat messages
- The streaming chat-completion request and its JSON payload
- Injected provider configuration (endpoint, model, credential, headers)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MessageRole(Enum):
    """OpenAI-compatible message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """One turn of the conversation.

    Diagnostic messages are shown to the user in place of an assistant reply
    but are never sent upstream.
    """
    role: MessageRole
    content: str
    diagnostic: bool = False

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        return cls(MessageRole.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> ChatMessage:
        return cls(MessageRole.ASSISTANT, content)


@dataclass
class ChatCompletionRequest:
    """Complete chat-completion request structure."""
    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float = 0.2
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        """JSON body for POST /chat/completions."""
        return {
            "model": self.model,
            "messages": [m.to_wire() for m in self.messages],
            "stream": self.stream,
            "temperature": self.temperature,
        }


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration."""
    provider: str
    base_url: str
    model: str
    api_key: str
    temperature: float = 0.2

    # Sent as X-Title and HTTP-Referer
    app_name: str | None = None
    app_url: str | None = None

    # Connection settings; read_timeout of None leaves stream reads unbounded
    connect_timeout: float = 10.0
    read_timeout: float | None = None
    write_timeout: float = 10.0
    pool_timeout: float = 10.0

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        if self.app_url:
            headers["HTTP-Referer"] = self.app_url
        if self.app_name:
            headers["X-Title"] = self.app_name
        return headers
