"""Handlers that run a task inside the page: execute_js, get_dom, local storage and element helpers."""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

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
from webviewbridge.utils.exceptions import InvalidParameterError, SerializationError

SELECTOR_TYPES = ("css", "id", "class", "tag", "text", "xpath")
LOCAL_STORAGE_ACTIONS = ("get", "set", "remove", "clear", "keys")


class ExecuteJsRequest(BridgeRequest):
    code: str = Field(min_length=1)


class SelectorRequest(BridgeRequest):
    selector_type: str = "css"
    selector_value: str = Field(min_length=1)

    @field_validator("selector_type", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class ElementPositionRequest(SelectorRequest):
    should_click: bool = False


class SendTextRequest(SelectorRequest):
    text: str
    delay_ms: int = Field(default=20, ge=0)


class LocalStorageRequest(BridgeRequest):
    action: str = "get"
    key: str | None = None
    value: Any = None


class ElementPosition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: int
    y: int
    width: int
    height: int


def _check_selector(request: SelectorRequest) -> None:
    if request.selector_type not in SELECTOR_TYPES:
        raise InvalidParameterError("selector_type", "one of " + ", ".join(SELECTOR_TYPES), request.selector_type)


async def _execute_js(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(ExecuteJsRequest, payload, command=C.EXECUTE_JS)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_EXECUTE_JS,
        request.code,
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="javascript execution",
    )
    reply = decode_reply(raw, what="execute_js")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    result = reply.get("result")
    return Envelope.ok({"result": result, "type": type(result).__name__ if result is not None else "null"})


async def _get_dom(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(BridgeRequest, payload, command=C.GET_DOM)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_GET_DOM,
        {},
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="DOM retrieval",
    )
    reply = decode_reply(raw, what="DOM content")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    dom = reply.get("domContent", reply.get("dom_content"))
    if not isinstance(dom, str):
        return Envelope.fail("DOM content missing from response")
    logger.info("DOM content from {}: {} chars", request.window_label, len(dom))
    return Envelope.ok({"dom_content": dom, "length": len(dom)})


async def _manage_local_storage(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(LocalStorageRequest, payload, command=C.MANAGE_LOCAL_STORAGE)
    if request.action not in LOCAL_STORAGE_ACTIONS:
        raise InvalidParameterError("action", "one of " + ", ".join(LOCAL_STORAGE_ACTIONS), request.action)
    if request.action in ("set", "remove") and not request.key:
        raise InvalidParameterError("key", f"a key for {request.action}", "nothing")
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_LOCAL_STORAGE,
        {"action": request.action, "key": request.key, "value": request.value},
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="local storage operation",
    )
    reply = decode_reply(raw, what="local storage")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    return Envelope.ok(reply.get("data"))


async def _get_element_position(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(ElementPositionRequest, payload, command=C.GET_ELEMENT_POSITION)
    _check_selector(request)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_ELEMENT_POSITION,
        {
            "selector_type": request.selector_type,
            "selector_value": request.selector_value,
            "should_click": request.should_click,
        },
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="element position lookup",
    )
    reply = decode_reply(raw, what="element position")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    try:
        position = ElementPosition.model_validate(reply)
    except ValidationError as e:
        raise SerializationError(f"Failed to parse element position response: {e}") from e
    return Envelope.ok({**position.model_dump(), "clicked": request.should_click})


async def _send_text_to_element(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(SendTextRequest, payload, command=C.SEND_TEXT_TO_ELEMENT)
    _check_selector(request)
    resolve_window(context, request.window_label)
    raw = await context.bridge.call(
        request.window_label,
        P.TOPIC_SEND_TEXT,
        {
            "selector_type": request.selector_type,
            "selector_value": request.selector_value,
            "text": request.text,
            "delay_ms": request.delay_ms,
        },
        timeout_ms=bridge_timeout(request, context.config.bridge.script_timeout_ms),
        operation="send text to element",
    )
    reply = decode_reply(raw, what="send text")
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    return Envelope.ok(
        {
            "message": f"Sent {len(request.text)} characters to {request.selector_type} '{request.selector_value}'",
            "length": len(request.text),
        }
    )


_HANDLERS = {
    C.EXECUTE_JS: _execute_js,
    C.GET_DOM: _get_dom,
    C.MANAGE_LOCAL_STORAGE: _manage_local_storage,
    C.GET_ELEMENT_POSITION: _get_element_position,
    C.SEND_TEXT_TO_ELEMENT: _send_text_to_element,
}


async def try_handle_webview_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    handler = _HANDLERS.get(command)
    if handler is None:
        return None
    return await handler(payload, context)
