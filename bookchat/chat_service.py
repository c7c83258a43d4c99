"""
Chat session for the bookstore assistant.

This module owns the caller side of a streaming send:
- The ordered conversation, starting with a greeting from the assistant
- The editable system prompt and the canned suggestion questions
- A "sending" gate allowing one in-flight request per session
- Materialising streamed fragments into the growing assistant turn
- Rendering one diagnostic message when a send fails
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .llm.exceptions import LLMError
from .llm.models import ChatMessage, MessageRole
from .llm.streaming.models import FragmentSink
from .logging_utils import (
    DEFAULT_DIAGNOSTIC_PREFIX,
    ChatErrorHandler,
    ContextualLogger,
)

if TYPE_CHECKING:                                        # pragma: no cover
    from .config import Configuration
    from .llm.client import ChatCompletionsClient


class AssistantTurnSink:
    """Writes each fragment into the session's assistant placeholder.

    The list element is replaced rather than mutated, and every notification
    is forwarded to the session listener when one is attached.
    """

    def __init__(
        self,
        messages: list[ChatMessage],
        index: int,
        listener: FragmentSink | None = None,
    ):
        self.messages = messages
        self.index = index
        self.listener = listener

    def on_fragment(self, fragment: str) -> None:
        current = self.messages[self.index]
        self.messages[self.index] = dataclasses.replace(
            current, content=current.content + fragment
        )
        if self.listener is not None:
            self.listener.on_fragment(fragment)

    def on_complete(self, text: str) -> None:
        if self.listener is not None:
            self.listener.on_complete(text)

    def on_error(self, message: str) -> None:
        if self.listener is not None:
            self.listener.on_error(message)


class ChatSession:
    """
    One user's conversation with the bookstore assistant.
    1. Validates the question and gates concurrent sends
    2. Streams the reply into an assistant placeholder
    3. Appends a diagnostic message after any partial reply when a send fails
    """

    class SessionConfig(BaseModel):
        model_config = ConfigDict(arbitrary_types_allowed=True)

        client: Any  # ChatCompletionsClient
        system_prompt: str
        greeting: str = ""
        suggestions: list[str] = Field(default_factory=list)
        diagnostic_prefix: str = DEFAULT_DIAGNOSTIC_PREFIX

    def __init__(
        self,
        session_config: ChatSession.SessionConfig,
        listener: FragmentSink | None = None,
    ):
        self.client: ChatCompletionsClient = session_config.client
        self.system_prompt = session_config.system_prompt
        self.suggestions = list(session_config.suggestions)
        self.diagnostic_prefix = session_config.diagnostic_prefix
        self.listener = listener

        self.messages: list[ChatMessage] = []
        if session_config.greeting:
            self.messages.append(ChatMessage.assistant(session_config.greeting))

        self.is_sending = False
        self._logger = ContextualLogger({"component": "chat_session"})

    @classmethod
    def from_configuration(
        cls,
        configuration: Configuration,
        client: ChatCompletionsClient,
        listener: FragmentSink | None = None,
    ) -> ChatSession:
        service_config = configuration.get_chat_service_config()
        return cls(
            cls.SessionConfig(client=client, **service_config),
            listener=listener,
        )

    @property
    def history(self) -> list[ChatMessage]:
        """Messages eligible to be sent upstream."""
        return [m for m in self.messages if not m.diagnostic]

    def can_send(self, text: str | None) -> bool:
        return bool(text and text.strip()) and not self.is_sending

    async def send(self, text: str | None) -> ChatMessage | None:
        """Send one user question and stream the reply into the conversation.

        Returns the final assistant message, the diagnostic message on
        failure, or None when the send was refused.
        """
        if not self.can_send(text):
            if self.is_sending:
                self._logger.warning("Send refused while a reply is streaming")
            return None

        request = self.client.build_request(
            self.history, text, self.system_prompt
        )
        self.messages.append(request.messages[-1])
        assistant_index = len(self.messages)
        self.messages.append(ChatMessage.assistant(""))
        sink = AssistantTurnSink(self.messages, assistant_index, self.listener)

        self.is_sending = True
        try:
            await self.client.stream_completion(request, sink)
            reply = self.messages[assistant_index]
            self._logger.info("Reply received", chars=len(reply.content))
            return reply

        except LLMError as e:
            diagnostic = ChatMessage(
                MessageRole.ASSISTANT,
                ChatErrorHandler.diagnostic_message(e, self.diagnostic_prefix),
                diagnostic=True,
            )
            partial = self.messages[assistant_index].content
            if not partial:
                del self.messages[assistant_index]
            self.messages.append(diagnostic)

            self._logger.warning(
                "Send failed, diagnostic appended",
                error_category=ChatErrorHandler.classify_error(e),
                partial_chars=len(partial),
            )
            sink.on_error(diagnostic.content)
            return diagnostic

        finally:
            self.is_sending = False

    async def send_suggestion(self, index: int) -> ChatMessage | None:
        """Send one of the configured suggestion questions."""
        return await self.send(self.suggestions[index])
