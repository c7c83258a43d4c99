#!/usr/bin/env python3
"""
Test script for logging utilities.

This validates that the centralized logging and error classification works
correctly.
"""

import pytest
from pydantic import BaseModel, ValidationError

from bookchat.llm.exceptions import (
    LLMError,
    MalformedFrameError,
    QuotaExceededError,
    StreamingError,
    TransportError,
    UpstreamError,
)
from bookchat.logging_utils import (
    ChatErrorHandler,
    ContextualLogger,
    operation_context,
)


class TestChatErrorHandler:
    """Test the ChatErrorHandler class."""

    def test_classify_quota_exceeded(self):
        assert ChatErrorHandler.classify_error(QuotaExceededError()) == "quota_exceeded"

    def test_classify_upstream_error(self):
        error = UpstreamError(500, "Internal Server Error")
        assert ChatErrorHandler.classify_error(error) == "upstream_error"
        assert error.status_code == 500

    def test_classify_transport_error(self):
        error = TransportError("ConnectError: refused")
        assert ChatErrorHandler.classify_error(error) == "transport_error"

    def test_classify_malformed_frame(self):
        error = MalformedFrameError("Invalid JSON", payload="{oops")
        assert isinstance(error, StreamingError)
        assert ChatErrorHandler.classify_error(error) == "malformed_frame"

    def test_classify_generic_llm_error(self):
        assert ChatErrorHandler.classify_error(LLMError("other")) == "llm_error"

    def test_classify_validation_error(self):
        class Model(BaseModel):
            value: int

        with pytest.raises(ValidationError) as exc_info:
            Model(value="not a number")
        assert ChatErrorHandler.classify_error(exc_info.value) == "validation_error"

    def test_classify_builtin_errors(self):
        assert ChatErrorHandler.classify_error(TimeoutError("slow")) == "timeout_error"
        assert ChatErrorHandler.classify_error(ConnectionError("down")) == "connection_error"
        assert ChatErrorHandler.classify_error(ValueError("bad")) == "parameter_error"
        assert ChatErrorHandler.classify_error(RuntimeError("?")) == "unknown_error"

    def test_diagnostic_message(self):
        message = ChatErrorHandler.diagnostic_message(QuotaExceededError())
        assert message == "⚠️ API request failed: Your free plan quota is exceeded."

    def test_diagnostic_message_custom_prefix(self):
        error = UpstreamError(503, "Service Unavailable")
        message = ChatErrorHandler.diagnostic_message(error, prefix="[error] ")
        assert message == "[error] Upstream error: 503 Service Unavailable"


class RecordingLogger:
    def __init__(self, **context):
        self.context = context
        self.events: list[tuple[str, str, dict]] = []

    def bind(self, **context):
        bound = RecordingLogger(**{**self.context, **context})
        bound.events = self.events
        return bound

    def info(self, message, **kw):
        self.events.append(("info", message, {**self.context, **kw}))

    def warning(self, message, **kw):
        self.events.append(("warning", message, {**self.context, **kw}))

    def error(self, message, **kw):
        self.events.append(("error", message, {**self.context, **kw}))


class TestOperationContext:
    """Test the operation_context async context manager."""

    @pytest.mark.asyncio
    async def test_operation_context_success(self):
        async with operation_context("test_operation", log_timing=True) as op_logger:
            assert op_logger is not None
            op_logger.info("inside operation")

    @pytest.mark.asyncio
    async def test_operation_context_reraises(self):
        with pytest.raises(TransportError, match="connection reset"):
            async with operation_context("test_operation"):
                raise TransportError("ReadError: connection reset")

    @pytest.mark.asyncio
    async def test_operation_context_logs_outcome(self, monkeypatch):
        recorder = RecordingLogger()
        monkeypatch.setattr("bookchat.logging_utils.logger", recorder)

        async with operation_context("ok_operation", context={"model": "m"}):
            pass
        with pytest.raises(UpstreamError):
            async with operation_context("bad_operation", log_timing=False):
                raise UpstreamError(502, "Bad Gateway")

        levels = [(level, message) for level, message, _ in recorder.events]
        assert levels == [
            ("info", "Operation started"),
            ("info", "Operation completed successfully"),
            ("info", "Operation started"),
            ("error", "Operation failed"),
        ]
        completed = recorder.events[1][2]
        assert completed["operation"] == "ok_operation"
        assert completed["model"] == "m"
        assert "duration_ms" in completed

        failed = recorder.events[3][2]
        assert failed["error_category"] == "upstream_error"
        assert failed["status_code"] == 502
        assert "duration_ms" not in failed


class TestContextualLogger:
    """Test the ContextualLogger class."""

    def test_base_context_defaults_to_empty(self):
        assert ContextualLogger().base_context == {}

    def test_logging_methods_carry_base_context(self, monkeypatch):
        recorder = RecordingLogger()
        monkeypatch.setattr("bookchat.logging_utils.logger", recorder)

        log = ContextualLogger({"component": "chat_session"})
        log.info("info message", chars=3)
        log.warning("warning message")

        assert recorder.events == [
            ("info", "info message", {"component": "chat_session", "chars": 3}),
            ("warning", "warning message", {"component": "chat_session"}),
        ]
