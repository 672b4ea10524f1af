"""Tests for webviewbridge.utils.exceptions module."""

from __future__ import annotations

import asyncio

from webviewbridge.utils.exceptions import (
    BridgeTimeoutError,
    CommunicationError,
    ErrorCategory,
    GenericError,
    InvalidParameterError,
    SerializationError,
    WindowNotFoundError,
    WindowOperationError,
    classify_exception,
    sanitize_error_message,
    wrap_exception,
)


class TestExceptionClasses:
    def test_window_not_found(self) -> None:
        exc = WindowNotFoundError("settings")
        assert str(exc) == "Window not found: settings"
        assert exc.label == "settings"
        assert exc.category == ErrorCategory.NOT_FOUND

    def test_timeout_message(self) -> None:
        exc = BridgeTimeoutError("console logs retrieval", 10000)
        assert str(exc) == "Operation timed out: console logs retrieval (exceeded 10000ms)"
        assert exc.to_dict()["details"] == {"operation": "console logs retrieval", "duration_ms": 10000}

    def test_invalid_parameter_message(self) -> None:
        exc = InvalidParameterError("level", "one of debug, info", "loud")
        assert str(exc) == "Invalid parameter 'level': expected one of debug, info, got loud"
        assert exc.category == ErrorCategory.VALIDATION

    def test_window_operation_and_serialization(self) -> None:
        assert str(WindowOperationError("capture", "no display")) == "Window operation failed: capture - no display"
        assert str(SerializationError("bad json")) == "Serialization error: bad json"
        assert str(CommunicationError("gone")).startswith("Communication error: gone")


class TestHelpers:
    def test_classify_bridge_and_builtin_errors(self) -> None:
        assert classify_exception(BridgeTimeoutError("x", 1)) == ("TIMEOUT", ErrorCategory.TIMEOUT, True)
        assert classify_exception(asyncio.TimeoutError())[1] == ErrorCategory.TIMEOUT
        assert classify_exception(ValueError("x"))[1] == ErrorCategory.VALIDATION

    def test_wrap_exception(self) -> None:
        exc = WindowNotFoundError("main")
        assert wrap_exception(exc) is exc
        wrapped = wrap_exception(RuntimeError("kaput"))
        assert isinstance(wrapped, GenericError)
        assert str(wrapped) == "kaput"

    def test_sanitize_redacts_tokens(self) -> None:
        text = sanitize_error_message("failed with token=abc123")
        assert "abc123" not in text
        assert "[REDACTED]" in text
