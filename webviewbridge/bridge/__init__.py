"""Correlation bridge between command handlers and attached webviews."""

from webviewbridge.bridge.correlation import CorrelationBridge, PendingCorrelation

__all__ = ["CorrelationBridge", "PendingCorrelation"]
