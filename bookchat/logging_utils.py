"""
Centralized logging and error handling utilities for bookchat.

This module provides helper functions to standardize logging
and error reporting across the client, decoder and chat session.

Features:
- Structured logging with contextual information
- Error classification for the chat-completion failure taxonomy
- User-facing diagnostic rendering
- Performance timing
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

import structlog
from pydantic import ValidationError

from .llm.exceptions import (
    LLMError,
    MalformedFrameError,
    QuotaExceededError,
    TransportError,
    UpstreamError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

DEFAULT_DIAGNOSTIC_PREFIX = "⚠️ API request failed: "

logger = structlog.get_logger(__name__)


class ChatErrorHandler:
    """Centralized error classification and diagnostic rendering."""

    @staticmethod
    def classify_error(error: Exception) -> str:
        """
        Classify an error into a stable category for structured logs.

        Args:
            error: The exception to classify

        Returns:
            Category name
        """
        if isinstance(error, QuotaExceededError):
            return "quota_exceeded"
        if isinstance(error, UpstreamError):
            return "upstream_error"
        if isinstance(error, TransportError):
            return "transport_error"
        if isinstance(error, MalformedFrameError):
            return "malformed_frame"
        if isinstance(error, LLMError):
            return "llm_error"
        if isinstance(error, ValidationError):
            return "validation_error"
        if isinstance(error, TimeoutError):
            return "timeout_error"
        if isinstance(error, ConnectionError | OSError):
            return "connection_error"
        if isinstance(error, ValueError | TypeError):
            return "parameter_error"
        return "unknown_error"

    @staticmethod
    def diagnostic_message(
        error: Exception,
        prefix: str = DEFAULT_DIAGNOSTIC_PREFIX,
    ) -> str:
        """
        Render the text shown to the user in place of an assistant reply.

        Args:
            error: The failure that ended the send
            prefix: Marker distinguishing diagnostics from model output

        Returns:
            Diagnostic text
        """
        return f"{prefix}{error!s}"


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.info("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger

        log_data: dict[str, Any] = {}
        if log_timing and start_time is not None:
            log_data["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)

        operation_logger.info("Operation completed successfully", **log_data)

    except Exception as e:
        error_log_data: dict[str, Any] = {
            "error_type": type(e).__name__,
            "error_category": ChatErrorHandler.classify_error(e),
            "error_message": str(e),
        }
        status_code = getattr(e, "status_code", None)
        if status_code is not None:
            error_log_data["status_code"] = status_code
        if log_timing and start_time is not None:
            error_log_data["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)

        operation_logger.error("Operation failed", **error_log_data)
        raise


class ContextualLogger:
    """Logger that maintains context across related operations."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._logger.warning(message, **context)
