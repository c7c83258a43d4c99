"""
Direct HTTP client for streaming chat completions.

Builds the request (system prompt + prior turns + new user turn), opens one
streaming POST against the provider and maps failures onto the error
taxonomy. Decoding of the body is delegated to SSEStreamDecoder.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextlib import asynccontextmanager

import httpx
import structlog

from ..logging_utils import operation_context
from .exceptions import QuotaExceededError, TransportError, UpstreamError
from .models import ChatCompletionRequest, ChatMessage, ProviderConfig
from .streaming.models import FragmentSink
from .streaming.parser import SSEStreamDecoder

logger = structlog.get_logger(__name__)

COMPLETIONS_PATH = "/chat/completions"


class ChatCompletionsClient:
    """HTTP client for OpenAI-compatible streaming chat completions."""

    def __init__(
        self,
        provider: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.provider = provider
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=provider.base_url,
            headers=provider.headers,
            timeout=httpx.Timeout(
                connect=provider.connect_timeout,
                read=provider.read_timeout,
                write=provider.write_timeout,
                pool=provider.pool_timeout,
            ),
            transport=transport,
        )

    @staticmethod
    def build_messages(
        history: Sequence[ChatMessage],
        user_text: str,
        system_prompt: str,
    ) -> list[ChatMessage]:
        """Prepend one system message to the history and the new user turn.

        Raises:
            ValueError: If user_text is blank.
        """
        text = user_text.strip()
        if not text:
            raise ValueError("User message must not be empty")

        return [
            ChatMessage.system(system_prompt),
            *(m for m in history if not m.diagnostic),
            ChatMessage.user(text),
        ]

    def build_request(
        self,
        history: Sequence[ChatMessage],
        user_text: str,
        system_prompt: str,
    ) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            model=self.provider.model,
            messages=self.build_messages(history, user_text, system_prompt),
            temperature=self.provider.temperature,
            stream=True,
        )

    @asynccontextmanager
    async def open_stream(
        self, request: ChatCompletionRequest
    ) -> AsyncIterator[httpx.Response]:
        """POST the request and yield the open streaming response on 2xx.

        Request failures raised while the caller reads the body (transport
        errors, corrupt content encoding) are mapped to TransportError as well.
        """
        try:
            async with self.client.stream(
                "POST", COMPLETIONS_PATH, json=request.to_payload()
            ) as response:
                if not response.is_success:
                    self._raise_for_status(response)

                logger.info(
                    "Stream opened",
                    provider=self.provider.provider,
                    model=request.model,
                    status_code=response.status_code,
                    messages=len(request.messages),
                )
                yield response

        except (httpx.RequestError, httpx.StreamError) as e:
            raise TransportError(
                f"{type(e).__name__}: {e!s}" if str(e) else type(e).__name__,
                provider=self.provider.provider,
                model=request.model,
            ) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == QuotaExceededError.HTTP_STATUS:
            raise QuotaExceededError(
                provider=self.provider.provider,
                model=self.provider.model,
            )
        raise UpstreamError(
            response.status_code,
            response.reason_phrase,
            provider=self.provider.provider,
            model=self.provider.model,
        )

    async def stream_completion(
        self,
        request: ChatCompletionRequest,
        sink: FragmentSink | None = None,
    ) -> str:
        """Stream one completion into ``sink`` and return the full text.

        On success ``sink.on_complete`` receives the full text; errors
        propagate without touching the sink.
        """
        decoder = SSEStreamDecoder()
        async with operation_context(
            "stream_completion",
            context={"provider": self.provider.provider, "model": request.model},
        ) as op_logger:
            async with self.open_stream(request) as response:
                text = await decoder.decode(response.aiter_bytes(), sink)

            op_logger.info(
                "Stream finished",
                terminated=decoder.state.terminated,
                fragments=decoder.state.fragments,
                chars=len(text),
            )
        if sink is not None:
            sink.on_complete(text)
        return text

    async def iter_completion(
        self, request: ChatCompletionRequest
    ) -> AsyncGenerator[str]:
        """Yield fragments of one completion as they arrive."""
        decoder = SSEStreamDecoder()
        async with self.open_stream(request) as response:
            async for fragment in decoder.iter_fragments(response.aiter_bytes()):
                yield fragment

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ChatCompletionsClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
