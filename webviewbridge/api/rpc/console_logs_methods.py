"""Handlers for console log capture and retrieval."""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import (
    BridgeRequest,
    WindowRequest,
    bridge_timeout,
    cap_entries,
    decode_reply,
    parse_request,
    remote_error,
    resolve_window,
    validate_entries,
)
from webviewbridge.bridge import protocol as P
from webviewbridge.utils.exceptions import InvalidParameterError

LOG_LEVELS = ("debug", "info", "warn", "error", "all")


class ConsoleLogsRequest(BridgeRequest):
    level: str | None = None
    start_time_ms: int | None = None
    end_time_ms: int | None = None
    limit: int = Field(default=1000, gt=0)


class ConsoleLogEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timestamp: int
    level: str
    message: str
    args: list[str] = Field(default_factory=list)


def _normalize_level(level: str | None) -> str | None:
    if level is None:
        return None
    value = level.strip().lower()
    if value not in LOG_LEVELS:
        raise InvalidParameterError("level", "one of " + ", ".join(LOG_LEVELS), level)
    return None if value == "all" else value


async def _get_console_logs(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(ConsoleLogsRequest, payload, command=C.GET_CONSOLE_LOGS)
    level = _normalize_level(request.level)
    resolve_window(context, request.window_label)
    task = {
        "level": level,
        "start_time_ms": request.start_time_ms,
        "end_time_ms": request.end_time_ms,
        "limit": request.limit,
    }
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_GET_CONSOLE_LOGS,
        task,
        timeout_ms=bridge_timeout(request, context.config.bridge.retrieval_timeout_ms),
        operation="console logs retrieval",
    )
    reply = decode_reply(raw, what="console logs")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    entries = validate_entries(ConsoleLogEntry, reply.get("logs"), what="console logs")
    returned, total = cap_entries(entries, reported_total=reply.get("total_count"), limit=request.limit)
    logger.info("Console logs from {}: returned {} of {}", request.window_label, len(returned), total)
    return Envelope.ok(
        {
            "logs": [entry.model_dump() for entry in returned],
            "total_count": total,
            "returned_count": len(returned),
        }
    )


async def _inject_console_capture(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(WindowRequest, payload, command=C.INJECT_CONSOLE_CAPTURE)
    await context.bridge.notify(request.window_label, P.TOPIC_INJECT_CONSOLE_CAPTURE, {})
    return Envelope.ok({"message": f"Console capture injected into window '{request.window_label}'"})


async def try_handle_console_logs_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Handle get_console_logs and inject_console_capture."""
    if command == C.GET_CONSOLE_LOGS:
        return await _get_console_logs(payload, context)
    if command == C.INJECT_CONSOLE_CAPTURE:
        return await _inject_console_capture(payload, context)
    return None
