"""Common error-boundary helpers for command dispatch."""

from __future__ import annotations

from typing import Any, Callable

from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.utils.exceptions import (
    BridgeError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
    wrap_exception,
)

_CATEGORY_TO_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.RETRYABLE: 503,
    ErrorCategory.RECOVERABLE: 500,
    ErrorCategory.FATAL: 500,
}


def unknown_command_result(*, command: str) -> Envelope:
    """Build the standard unknown-command response, naming the command as received."""
    return Envelope.fail(f"Unknown command: {command}")


def bridge_error_result(
    *,
    command: str,
    exc: BridgeError,
    log_warning: Callable[..., None],
) -> Envelope:
    """Map a BridgeError to a failure envelope carrying its message."""
    log_warning("Command {} failed with {}: {}", command, exc.code, exc.message)
    return Envelope.fail(exc.message)


def unhandled_exception_result(
    *,
    command: str,
    exc: Exception,
    log_exception: Callable[..., None],
) -> Envelope:
    """Map unexpected exceptions to a wrapped generic error envelope."""
    code, _, _ = classify_exception(exc)
    log_exception("Command {} failed with [{}]: {}", command, code, sanitize_error_message(str(exc)))
    return Envelope.fail(wrap_exception(exc).message)


def classify_http_status(exc: Exception) -> int:
    """Map exception to appropriate HTTP status code."""
    _, category, _ = classify_exception(exc)
    return _CATEGORY_TO_STATUS.get(category, 500)


def error_body(exc: Exception) -> dict[str, Any]:
    """JSON body for HTTP error responses."""
    return {"ok": False, **wrap_exception(exc).to_dict()}
