"""Handler for state_dump: cycle-safe snapshot of state containers."""

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
from webviewbridge.tasks.state_dump_script import build_state_dump_script


class StateDumpRequest(BridgeRequest):
    max_depth: int = Field(default=10, ge=0, le=100)
    path: str | None = None


async def try_handle_state_dump_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    if command != C.STATE_DUMP:
        return None
    request = parse_request(StateDumpRequest, payload, command=command)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_EXECUTE_JS,
        build_state_dump_script(max_depth=request.max_depth, path=request.path),
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="state dump execution",
    )
    reply = decode_reply(raw, what="state dump")
    return parse_script_result(reply, what="state dump", label=request.window_label)
