"""Handler for get_performance_metrics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

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
from webviewbridge.tasks.performance_script import ResourceFilter, build_performance_script


class ResourceFilterModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resource_type: list[str] = Field(default_factory=list)
    min_duration_ms: float | None = None
    max_duration_ms: float | None = None
    url_pattern: str | None = None


class PerformanceMetricsRequest(BridgeRequest):
    include_navigation: bool = True
    include_resources: bool = True
    include_user_timing: bool = True
    include_memory: bool = True
    include_long_tasks: bool = False
    resource_filter: ResourceFilterModel | None = None


async def try_handle_performance_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Collect navigation, resource, user timing, memory and long task metrics."""
    if command != C.GET_PERFORMANCE_METRICS:
        return None
    request = parse_request(PerformanceMetricsRequest, payload, command=command)
    resolve_window(context, request.window_label)
    rf = request.resource_filter
    script = build_performance_script(
        include_navigation=request.include_navigation,
        include_resources=request.include_resources,
        include_user_timing=request.include_user_timing,
        include_memory=request.include_memory,
        include_long_tasks=request.include_long_tasks,
        resource_filter=ResourceFilter(**rf.model_dump()) if rf is not None else None,
    )
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_EXECUTE_JS,
        script,
        timeout_ms=bridge_timeout(request, context.config.bridge.retrieval_timeout_ms),
        operation="performance metrics execution",
    )
    reply = decode_reply(raw, what="performance metrics")
    return parse_script_result(reply, what="performance metrics", label=request.window_label)
