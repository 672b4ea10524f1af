"""Handlers for ping / health_check: local introspection, no webview required."""

from __future__ import annotations

import os
import platform
import sys
import time
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict

from webviewbridge import __version__
from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import DEFAULT_WINDOW_LABEL, parse_request


class PingRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: Any = None


def _os_name() -> str:
    return {"darwin": "macOS", "win32": "Windows", "linux": "Linux"}.get(sys.platform, sys.platform or "Unknown")


def _platform_family() -> str:
    if os.name == "nt":
        return "Windows"
    if os.name == "posix":
        return "Unix"
    return "Unknown"


def build_health_report(context: CommandContext) -> dict[str, Any]:
    """Snapshot of host status; never touches a webview."""
    return {
        "status": "healthy",
        "version": __version__,
        "build_info": {
            "version": __version__,
            "python_version": platform.python_version(),
            "implementation": platform.python_implementation(),
        },
        "system_info": {
            "os": _os_name(),
            "platform": _platform_family(),
            "arch": platform.machine() or "unknown",
            "cpu_count": os.cpu_count() or 1,
        },
        "capabilities": [name for name in C.ALL_COMMANDS if name != C.PING],
        "connection_status": {
            # The dispatcher can only be reached through the listener, so answering means it is up.
            "socket_server_running": True,
            "event_system_available": True,
        },
        "webview_status": {
            "webview_available": len(context.registry) > 0,
            "main_window_available": context.registry.contains(DEFAULT_WINDOW_LABEL),
            "attached_windows": context.registry.labels(),
            "pending_correlations": context.bridge.pending_count(),
        },
        "uptime_seconds": round(time.time() - context.started_at, 3),
    }


async def try_handle_health_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Handle ping and health_check."""
    if command == C.PING:
        request = parse_request(PingRequest, payload, command=command)
        return Envelope.ok({"value": "pong" if request.value is None else request.value})
    if command == C.HEALTH_CHECK:
        logger.info("Health check requested")
        return Envelope.ok(build_health_report(context))
    return None
