"""Shared dataclass models for command dispatch context."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from webviewbridge.bridge.correlation import CorrelationBridge
from webviewbridge.config.schema import Config
from webviewbridge.webview.registry import WebviewRegistry


@dataclass(slots=True)
class CommandHandlers:
    """Handler callables consulted, in order, by the dispatch pipeline."""

    try_handle_health_method: Callable[..., Awaitable[Any]]
    try_handle_webview_method: Callable[..., Awaitable[Any]]
    try_handle_console_logs_method: Callable[..., Awaitable[Any]]
    try_handle_error_tracker_method: Callable[..., Awaitable[Any]]
    try_handle_network_inspector_method: Callable[..., Awaitable[Any]]
    try_handle_performance_method: Callable[..., Awaitable[Any]]
    try_handle_devtools_bridge_method: Callable[..., Awaitable[Any]]
    try_handle_state_dump_method: Callable[..., Awaitable[Any]]
    try_handle_storage_inspector_method: Callable[..., Awaitable[Any]]
    try_handle_hot_reload_method: Callable[..., Awaitable[Any]]
    try_handle_window_method: Callable[..., Awaitable[Any]]


@dataclass(slots=True)
class CommandContext:
    """Process-wide dependencies shared by every dispatch."""

    registry: WebviewRegistry
    bridge: CorrelationBridge
    config: Config
    desktop: Any
    started_at: float = field(default_factory=time.time)

    @classmethod
    def create(cls, *, config: Config, desktop: Any = None, registry: WebviewRegistry | None = None) -> "CommandContext":
        """Wire a fresh registry and bridge around ``config``."""
        registry = registry if registry is not None else WebviewRegistry()
        if desktop is None:
            from webviewbridge.desktop.backend import DesktopBackend

            desktop = DesktopBackend()
        return cls(registry=registry, bridge=CorrelationBridge(registry), config=config, desktop=desktop)


@dataclass(slots=True)
class CommandRequest:
    """One inbound command."""

    command: str
    payload: Any
    context: CommandContext
