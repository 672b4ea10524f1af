"""Helpers for the /ws/webview attach endpoint."""

from __future__ import annotations

import json
import uuid
from typing import Any, Callable

from webviewbridge.bridge.correlation import CorrelationBridge
from webviewbridge.webview.registry import WebSocketWebviewHandle, WebviewRegistry


async def bootstrap_webview_ws_connection(
    *,
    websocket: Any,
    registry: WebviewRegistry,
    bridge: CorrelationBridge,
    logger_info: Callable[..., None],
) -> WebSocketWebviewHandle | None:
    """Accept the socket and register the webview named by its attach frame.

    Returns None (after closing the socket) when the first frame is not a
    valid attach frame.
    """
    await websocket.accept()
    try:
        frame = json.loads(await websocket.receive_text())
    except json.JSONDecodeError:
        frame = None
    label = frame.get("label") if isinstance(frame, dict) and frame.get("type") == "attach" else None
    if not isinstance(label, str) or not label.strip():
        await websocket.send_json({"type": "error", "error": "first frame must be {\"type\": \"attach\", \"label\": ...}"})
        await websocket.close(code=1008)
        return None
    handle = WebSocketWebviewHandle(
        label.strip(),
        websocket=websocket,
        conn_id=f"wv_{uuid.uuid4().hex[:12]}",
        title=str(frame.get("title") or ""),
        url=str(frame.get("url") or ""),
    )
    previous = registry.register(handle)
    if previous is not None and previous is not handle:
        failed = bridge.fail_pending_for(handle.label, reason="replaced by a new attachment")
        logger_info("Webview {} re-attached, failed {} pending calls of the old attachment", handle.label, failed)
    await websocket.send_json({"type": "attached", "label": handle.label, "conn_id": handle.conn_id})
    return handle


async def run_webview_ws_loop(
    *,
    websocket: Any,
    handle: WebSocketWebviewHandle,
    bridge: CorrelationBridge,
    logger_debug: Callable[..., None],
) -> None:
    """Route reply and location frames until the socket closes."""
    while True:
        text = await websocket.receive_text()
        try:
            frame = json.loads(text)
        except json.JSONDecodeError as e:
            await websocket.send_json({"type": "error", "error": f"invalid JSON frame: {e}"})
            continue
        if not isinstance(frame, dict):
            await websocket.send_json({"type": "error", "error": "frame must be a JSON object"})
            continue
        kind = frame.get("type")
        if kind == "event" and isinstance(frame.get("event"), str):
            if not bridge.handle_reply(handle.label, frame["event"], frame.get("payload")):
                logger_debug("Unmatched event {} from {}", frame["event"], handle.label)
        elif kind == "location" and isinstance(frame.get("url"), str):
            handle.url = frame["url"]
            if isinstance(frame.get("title"), str):
                handle.title = frame["title"]
        else:
            await websocket.send_json({"type": "error", "error": f"unsupported frame type: {kind}"})


async def cleanup_webview_ws_connection(
    *,
    handle: WebSocketWebviewHandle,
    registry: WebviewRegistry,
    reason: str,
    logger_error: Callable[..., None] | None = None,
    exc: Exception | None = None,
) -> None:
    """Detach the webview on disconnect/error; pending calls fail through the registry listener."""
    if exc is not None and logger_error is not None:
        logger_error("Webview WebSocket error ({}): {}", handle.label, exc)
    await registry.unregister(handle.label, handle=handle, reason=reason)
