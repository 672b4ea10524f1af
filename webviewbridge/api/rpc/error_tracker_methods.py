"""Handlers for uncaught exception tracking inside webviews."""

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

ERROR_TYPES = ("uncaught", "unhandledrejection", "reactboundary", "all")


class StackFrame(BaseModel):
    model_config = ConfigDict(extra="ignore")

    function_name: str | None = None
    file_name: str | None = None
    line_number: int | None = None
    column_number: int | None = None
    source_mapped_file: str | None = None
    source_mapped_line: int | None = None
    source_mapped_column: int | None = None


class ExceptionEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    error_type: str
    message: str
    stack_trace: list[StackFrame] = Field(default_factory=list)
    first_occurrence_ms: int
    last_occurrence_ms: int
    frequency: int = 1
    error_details: str | None = None


class GetExceptionsRequest(BridgeRequest):
    error_type: str | None = None
    message_pattern: str | None = None
    start_time_ms: int | None = None
    end_time_ms: int | None = None
    limit: int = Field(default=1000, gt=0)


class InjectErrorTrackerRequest(WindowRequest):
    circular_buffer_size: int = Field(default=1000, gt=0)


async def _get_exceptions(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(GetExceptionsRequest, payload, command=C.GET_EXCEPTIONS)
    if request.error_type and request.error_type not in ERROR_TYPES:
        raise InvalidParameterError("error_type", "one of " + ", ".join(ERROR_TYPES), request.error_type)
    resolve_window(context, request.window_label)
    error_type = request.error_type if request.error_type not in (None, "", "all") else None
    task = {
        "error_type": error_type,
        "message_pattern": request.message_pattern,
        "start_time_ms": request.start_time_ms,
        "end_time_ms": request.end_time_ms,
        "limit": request.limit,
    }
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_GET_EXCEPTIONS,
        task,
        timeout_ms=bridge_timeout(request, context.config.bridge.retrieval_timeout_ms),
        operation="exception retrieval",
    )
    reply = decode_reply(raw, what="exceptions")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    entries = validate_entries(ExceptionEntry, reply.get("exceptions"), what="exceptions")
    returned, total = cap_entries(entries, reported_total=reply.get("total_count"), limit=request.limit)
    logger.info("Exceptions from {}: returned {} of {}", request.window_label, len(returned), total)
    return Envelope.ok(
        {
            "exceptions": [entry.model_dump() for entry in returned],
            "total_count": total,
            "returned_count": len(returned),
        }
    )


async def try_handle_error_tracker_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Handle get_exceptions, inject_error_tracker and clear_exceptions."""
    if command == C.GET_EXCEPTIONS:
        return await _get_exceptions(payload, context)
    if command == C.INJECT_ERROR_TRACKER:
        request = parse_request(InjectErrorTrackerRequest, payload, command=command)
        await context.bridge.notify(
            request.window_label,
            P.TOPIC_INJECT_ERROR_TRACKER,
            {"circular_buffer_size": request.circular_buffer_size},
        )
        return Envelope.ok(
            {
                "message": f"Error tracker injected into window '{request.window_label}'",
                "circular_buffer_size": request.circular_buffer_size,
            }
        )
    if command == C.CLEAR_EXCEPTIONS:
        request = parse_request(WindowRequest, payload, command=command)
        await context.bridge.notify(request.window_label, P.TOPIC_CLEAR_EXCEPTIONS, {})
        return Envelope.ok({"message": f"Exceptions cleared in window '{request.window_label}'"})
    return None
