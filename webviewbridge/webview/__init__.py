"""Webview registry and handles."""

from webviewbridge.webview.registry import WebSocketWebviewHandle, WebviewHandle, WebviewRegistry

__all__ = ["WebviewHandle", "WebSocketWebviewHandle", "WebviewRegistry"]
