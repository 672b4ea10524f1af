"""Utility functions for webviewbridge."""

from webviewbridge.utils.helpers import ensure_dir, get_data_path, now_ms, preview_text
from webviewbridge.utils.exceptions import (
    BridgeError,
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

__all__ = [
    "ensure_dir",
    "get_data_path",
    "now_ms",
    "preview_text",
    "BridgeError",
    "BridgeTimeoutError",
    "CommunicationError",
    "ErrorCategory",
    "GenericError",
    "InvalidParameterError",
    "SerializationError",
    "WindowNotFoundError",
    "WindowOperationError",
    "classify_exception",
    "sanitize_error_message",
    "wrap_exception",
]
