"""Handler for devtools_bridge: bounded component tree walk."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import (
    BridgeRequest,
    bridge_timeout,
    decode_reply,
    parse_request,
    parse_script_result,
    resolve_window,
)
from webviewbridge.bridge import protocol as P
from webviewbridge.tasks.devtools_script import build_devtools_script


class DevToolsBridgeRequest(BridgeRequest):
    max_depth: int = Field(default=10, ge=0, le=100)
    component_filter: str | None = None


async def try_handle_devtools_bridge_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    if command != C.DEVTOOLS_BRIDGE:
        return None
    request = parse_request(DevToolsBridgeRequest, payload, command=command)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_EXECUTE_JS,
        build_devtools_script(max_depth=request.max_depth, component_filter=request.component_filter),
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="devtools bridge execution",
    )
    reply = decode_reply(raw, what="devtools")
    return parse_script_result(reply, what="devtools", label=request.window_label)
