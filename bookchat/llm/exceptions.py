"""
Error taxonomy for chat-completion streaming.

Every failure of a send operation surfaces as one of these kinds:
- QuotaExceededError for HTTP 402 from the provider
- UpstreamError for any other non-2xx response
- TransportError for connection, timeout and body-read failures
- MalformedFrameError for an undecodable payload inside the event stream

None of them is retried; callers render a single diagnostic per failure.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base LLM error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: str = "unknown",
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.response_data = response_data or {}


class QuotaExceededError(LLMError):
    """Provider answered 402: the account has no remaining credit."""

    HTTP_STATUS = 402

    def __init__(
        self,
        message: str = "Your free plan quota is exceeded.",
        **kwargs,
    ):
        kwargs.setdefault("status_code", self.HTTP_STATUS)
        super().__init__(message, **kwargs)


class UpstreamError(LLMError):
    """Non-2xx response other than 402."""

    def __init__(
        self,
        status_code: int,
        status_text: str = "",
        **kwargs,
    ):
        message = f"Upstream error: {status_code} {status_text}".rstrip()
        super().__init__(message, status_code=status_code, **kwargs)
        self.status_text = status_text


class TransportError(LLMError):
    """Network-level failure: refused connection, timeout, aborted body read."""
    pass


class StreamingError(LLMError):
    """Streaming-specific errors."""
    pass


class MalformedFrameError(StreamingError):
    """A data line in the event stream could not be decoded."""

    def __init__(self, message: str, payload: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload
