"""
Exception hierarchy and error handling utilities for webviewbridge.

Provides:
- Error classes for every failure a command can surface
- Error categorization (validation, not found, timeout, ...)
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


class BridgeError(Exception):
    """Base exception for all webviewbridge errors.

    ``str(err)`` is the client-facing message; it is what ends up in the
    ``error`` field of a failed envelope.
    """

    def __init__(
        self,
        message: str,
        code: str = "GENERIC_ERROR",
        category: ErrorCategory = ErrorCategory.RECOVERABLE,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class WindowNotFoundError(BridgeError):
    """No webview is registered under the requested label."""

    def __init__(self, label: str):
        super().__init__(
            f"Window not found: {label}",
            code="WINDOW_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"label": label},
        )
        self.label = label


class WindowOperationError(BridgeError):
    """A window level action (reload, capture, move, ...) failed."""

    def __init__(self, operation: str, reason: str, context: str | None = None):
        details: dict[str, Any] = {"operation": operation, "reason": reason}
        if context:
            details["context"] = context
        super().__init__(
            f"Window operation failed: {operation} - {reason}",
            code="WINDOW_OPERATION_FAILED",
            category=ErrorCategory.RECOVERABLE,
            details=details,
        )
        self.operation = operation
        self.reason = reason
        self.context = context


class InvalidParameterError(BridgeError):
    """A payload field has the wrong shape or value."""

    def __init__(self, param: str, expected: str, received: str):
        super().__init__(
            f"Invalid parameter '{param}': expected {expected}, got {received}",
            code="INVALID_PARAMETER",
            category=ErrorCategory.VALIDATION,
            details={"param": param, "expected": expected, "received": received},
        )
        self.param = param
        self.expected = expected
        self.received = received


class BridgeTimeoutError(BridgeError):
    """A correlated reply did not arrive before the deadline."""

    def __init__(self, operation: str, duration_ms: int):
        super().__init__(
            f"Operation timed out: {operation} (exceeded {duration_ms}ms)",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"operation": operation, "duration_ms": duration_ms},
        )
        self.operation = operation
        self.duration_ms = duration_ms


class SerializationError(BridgeError):
    """Payload or reply could not be decoded or encoded."""

    def __init__(self, message: str):
        super().__init__(
            f"Serialization error: {message}",
            code="SERIALIZATION_ERROR",
            category=ErrorCategory.VALIDATION,
            details={"reason": message},
        )
        self.reason = message


class CommunicationError(BridgeError):
    """Publishing to a webview failed, or the webview went away mid-call."""

    def __init__(self, message: str, context: str | None = None):
        details: dict[str, Any] = {"reason": message}
        if context:
            details["context"] = context
        super().__init__(
            f"Communication error: {message}",
            code="COMMUNICATION_ERROR",
            category=ErrorCategory.RETRYABLE,
            details=details,
        )
        self.reason = message
        self.context = context


class GenericError(BridgeError):
    """Fallback wrapper for lower level failures."""

    def __init__(self, message: str):
        super().__init__(message, code="GENERIC_ERROR", category=ErrorCategory.FATAL)


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{40,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Nothing in webviewbridge retries on its own; ``should_retry`` is a hint
    for clients.
    """
    if isinstance(exc, BridgeError):
        return exc.code, exc.category, exc.category in (ErrorCategory.RETRYABLE, ErrorCategory.TIMEOUT)

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.VALIDATION, False

    if isinstance(exc, TypeError):
        return "TYPE_ERROR", ErrorCategory.VALIDATION, False

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "not found" in exc_str:
        return "NOT_FOUND", ErrorCategory.NOT_FOUND, False

    return "UNKNOWN_ERROR", ErrorCategory.FATAL, False


def wrap_exception(exc: Exception) -> BridgeError:
    """Return ``exc`` unchanged if it is a BridgeError, else a GenericError around it."""
    if isinstance(exc, BridgeError):
        return exc
    text = sanitize_error_message(str(exc)) or type(exc).__name__
    return GenericError(text)
