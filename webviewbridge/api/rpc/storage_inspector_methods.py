"""Handler for storage_inspector: web storage and IndexedDB browsing."""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import Field

from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import (
    BridgeRequest,
    bridge_timeout,
    decode_reply,
    parse_request,
    remote_error,
    resolve_window,
)
from webviewbridge.bridge import protocol as P
from webviewbridge.utils.exceptions import InvalidParameterError

STORAGE_TYPES = ("localStorage", "sessionStorage")
ACTIONS = ("get_storage", "clear_storage", "list_indexeddb", "query_indexeddb")


class StorageInspectorRequest(BridgeRequest):
    action: str
    storage_type: str | None = None
    key_pattern: str | None = None
    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=50, gt=0, le=1000)
    db_name: str | None = None
    store_name: str | None = None


def _validate(request: StorageInspectorRequest) -> None:
    if request.action not in ACTIONS:
        raise InvalidParameterError("action", "one of " + ", ".join(ACTIONS), request.action)
    if request.action in ("get_storage", "clear_storage") and request.storage_type not in STORAGE_TYPES:
        raise InvalidParameterError(
            "storage_type",
            " or ".join(STORAGE_TYPES) + f" for {request.action}",
            request.storage_type or "nothing",
        )
    if request.action == "query_indexeddb":
        if not request.db_name:
            raise InvalidParameterError("db_name", "a database name for query_indexeddb", "nothing")
        if not request.store_name:
            raise InvalidParameterError("store_name", "an object store name for query_indexeddb", "nothing")


async def try_handle_storage_inspector_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    if command != C.STORAGE_INSPECTOR:
        return None
    request = parse_request(StorageInspectorRequest, payload, command=command)
    _validate(request)
    resolve_window(context, request.window_label)
    task = request.model_dump(exclude={"window_label", "timeout_ms"})
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_INSPECT_STORAGE,
        task,
        timeout_ms=bridge_timeout(request, context.config.bridge.retrieval_timeout_ms),
        operation="storage inspection",
    )
    reply = decode_reply(raw, what="storage inspector")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    logger.info("Storage inspection {} on {} completed", request.action, request.window_label)
    return Envelope.ok(reply.get("data"))
