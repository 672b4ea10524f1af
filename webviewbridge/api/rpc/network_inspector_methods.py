"""Handlers for the in-page network request capture buffer."""

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

ACTION_GET = "get_requests"
ACTION_CLEAR = "clear_requests"
ACTION_START = "start_capture"
ACTION_STOP = "stop_capture"
ACTIONS = (ACTION_GET, ACTION_CLEAR, ACTION_START, ACTION_STOP)

# Notify-only actions: topic and the capture state reported afterwards.
_NOTIFY_ACTIONS = {
    ACTION_CLEAR: (P.TOPIC_CLEAR_NETWORK_REQUESTS, True),
    ACTION_START: (P.TOPIC_START_NETWORK_CAPTURE, True),
    ACTION_STOP: (P.TOPIC_STOP_NETWORK_CAPTURE, False),
}


class NetworkRequestFilter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url_pattern: str | None = None
    method: str | None = None
    status_code: int | None = None
    min_duration_ms: int | None = None
    max_duration_ms: int | None = None
    request_type: str | None = None
    start_time_ms: int | None = None
    end_time_ms: int | None = None
    limit: int = Field(default=100, gt=0)


class NetworkInspectorRequest(BridgeRequest):
    action: str
    filter: NetworkRequestFilter | None = None


class NetworkRequestEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    url: str
    method: str
    request_type: str
    status_code: int | None = None
    request_headers: dict[str, str] = Field(default_factory=dict)
    response_headers: dict[str, str] = Field(default_factory=dict)
    request_body: str | None = None
    response_body: str | None = None
    error: str | None = None
    start_time_ms: int
    end_time_ms: int | None = None
    duration_ms: int | None = None


async def _get_requests(request: NetworkInspectorRequest, context: CommandContext) -> Envelope:
    flt = request.filter or NetworkRequestFilter()
    task = flt.model_dump()
    if flt.method:
        task["method"] = flt.method.upper()
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_GET_NETWORK_REQUESTS,
        task,
        timeout_ms=bridge_timeout(request, context.config.bridge.network_timeout_ms),
        operation="network requests retrieval",
    )
    reply = decode_reply(raw, what="network requests")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    entries = validate_entries(NetworkRequestEntry, reply.get("requests"), what="network requests")
    returned, total = cap_entries(entries, reported_total=reply.get("total_count"), limit=flt.limit)
    capture_active = reply.get("capture_active")
    logger.info("Network requests from {}: returned {} of {}", request.window_label, len(returned), total)
    return Envelope.ok(
        {
            "requests": [entry.model_dump() for entry in returned],
            "total_count": total,
            "returned_count": len(returned),
            "capture_active": capture_active if isinstance(capture_active, bool) else True,
        }
    )


async def _network_inspector(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(NetworkInspectorRequest, payload, command=C.NETWORK_INSPECTOR)
    if request.action not in ACTIONS:
        raise InvalidParameterError("action", "one of " + ", ".join(ACTIONS), request.action)
    resolve_window(context, request.window_label)
    if request.action == ACTION_GET:
        return await _get_requests(request, context)
    topic, capture_active = _NOTIFY_ACTIONS[request.action]
    await context.bridge.notify(request.window_label, topic, {})
    return Envelope.ok(
        {
            "requests": [],
            "total_count": 0,
            "returned_count": 0,
            "capture_active": capture_active,
        }
    )


async def try_handle_network_inspector_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Handle network_inspector and inject_network_capture."""
    if command == C.NETWORK_INSPECTOR:
        return await _network_inspector(payload, context)
    if command == C.INJECT_NETWORK_CAPTURE:
        request = parse_request(WindowRequest, payload, command=command)
        await context.bridge.notify(request.window_label, P.TOPIC_INJECT_NETWORK_CAPTURE, {})
        return Envelope.ok({"message": f"Network capture injected into window '{request.window_label}'"})
    return None
