"""Handlers that act on the native window hosting a webview.

The desktop backend is blocking, so every call goes through ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import Field, field_validator

from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import WindowRequest, parse_request, resolve_window
from webviewbridge.config.loader import camel_to_snake
from webviewbridge.desktop.capture import encode_image
from webviewbridge.utils.exceptions import BridgeError, InvalidParameterError, WindowOperationError
from webviewbridge.utils.helpers import ensure_dir
from webviewbridge.webview.registry import WebviewHandle

WINDOW_OPERATIONS = (
    "focus",
    "minimize",
    "maximize",
    "unmaximize",
    "close",
    "show",
    "hide",
    "set_position",
    "set_size",
    "center",
)
MOUSE_BUTTONS = ("left", "right", "middle")


class ScreenshotRequest(WindowRequest):
    quality: int | None = Field(default=None, ge=1, le=100)
    max_width: int | None = Field(default=None, gt=0)
    max_size_mb: float | None = Field(default=None, gt=0)
    format: Literal["jpeg", "png"] | None = None
    application_name: str = ""
    output_dir: str | None = None

    @field_validator("format", mode="before")
    @classmethod
    def _format(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.lower()
            return "jpeg" if value == "jpg" else value
        return value


class ManageWindowRequest(WindowRequest):
    operation: str
    x: int | None = None
    y: int | None = None
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    @field_validator("operation", mode="before")
    @classmethod
    def _snake(cls, value: Any) -> Any:
        return camel_to_snake(value.strip()).lower() if isinstance(value, str) else value


class TextInputRequest(WindowRequest):
    text: str
    delay_ms: int = Field(default=20, ge=0)
    focus_window: bool = True


class MouseMovementRequest(WindowRequest):
    x: int
    y: int
    relative: bool = False
    click: bool = False
    button: str = "left"
    duration_ms: int = Field(default=0, ge=0)


async def _native(operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
    """Run a blocking desktop call, normalizing failures to ``WindowOperationError``."""
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except BridgeError:
        raise
    except Exception as e:
        raise WindowOperationError(operation, str(e)) from e


async def _find_native_window(context: CommandContext, handle: WebviewHandle, application_name: str = "") -> Any:
    title = handle.title or handle.label
    return await _native(
        "find_window",
        context.desktop.find_window,
        title=title,
        application_name=application_name,
    )


def _write_screenshot(output_dir: str, data: bytes, fmt: str, label: str) -> str:
    directory = ensure_dir(Path(output_dir).expanduser())
    suffix = "png" if fmt == "png" else "jpg"
    path = directory / f"screenshot_{label}_{int(time.time() * 1000)}.{suffix}"
    path.write_bytes(data)
    return str(path)


async def _take_screenshot(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(ScreenshotRequest, payload, command=C.TAKE_SCREENSHOT)
    handle = resolve_window(context, request.window_label)
    defaults = context.config.screenshot
    window = await _find_native_window(context, handle, request.application_name)
    image = await _native("take_screenshot", context.desktop.capture, window)
    encoded = await _native(
        "take_screenshot",
        encode_image,
        image,
        fmt=request.format or defaults.format,
        quality=request.quality or defaults.quality,
        max_width=request.max_width or defaults.max_width,
        max_size_mb=request.max_size_mb or defaults.max_size_mb,
    )
    data: dict[str, Any] = {
        "data_url": encoded.data_url(),
        "format": encoded.format,
        "width": encoded.width,
        "height": encoded.height,
        "size_bytes": encoded.size_bytes,
    }
    if request.output_dir:
        data["file_path"] = await _native(
            "take_screenshot", _write_screenshot, request.output_dir, encoded.data, encoded.format, request.window_label
        )
    logger.info(
        "Screenshot of {}: {}x{} {} ({} bytes)",
        request.window_label,
        encoded.width,
        encoded.height,
        encoded.format,
        encoded.size_bytes,
    )
    return Envelope.ok(data)


async def _manage_window(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(ManageWindowRequest, payload, command=C.MANAGE_WINDOW)
    if request.operation not in WINDOW_OPERATIONS:
        raise InvalidParameterError("operation", "one of " + ", ".join(WINDOW_OPERATIONS), request.operation)
    params: dict[str, int] = {}
    if request.operation == "set_position":
        if request.x is None or request.y is None:
            raise InvalidParameterError("x/y", "both coordinates for set_position", "missing coordinate")
        params = {"x": request.x, "y": request.y}
    elif request.operation == "set_size":
        if request.width is None or request.height is None:
            raise InvalidParameterError("width/height", "both dimensions for set_size", "missing dimension")
        params = {"width": request.width, "height": request.height}
    handle = resolve_window(context, request.window_label)
    window = await _find_native_window(context, handle)
    await _native(request.operation, context.desktop.window_action, window, request.operation, **params)
    logger.info("Window {} operation {} done", request.window_label, request.operation)
    return Envelope.ok(
        {
            "message": f"Window '{request.window_label}' {request.operation} completed",
            "operation": request.operation,
            **params,
        }
    )


async def _simulate_text_input(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(TextInputRequest, payload, command=C.SIMULATE_TEXT_INPUT)
    handle = resolve_window(context, request.window_label)
    if request.focus_window:
        window = await _find_native_window(context, handle)
        await _native("focus", context.desktop.window_action, window, "focus")
    await _native("simulate_text_input", context.desktop.type_text, request.text, delay_ms=request.delay_ms)
    return Envelope.ok(
        {
            "message": f"Typed {len(request.text)} characters into window '{request.window_label}'",
            "length": len(request.text),
        }
    )


async def _simulate_mouse_movement(payload: Any, context: CommandContext) -> Envelope:
    request = parse_request(MouseMovementRequest, payload, command=C.SIMULATE_MOUSE_MOVEMENT)
    button = request.button.lower()
    if button not in MOUSE_BUTTONS:
        raise InvalidParameterError("button", "one of " + ", ".join(MOUSE_BUTTONS), request.button)
    handle = resolve_window(context, request.window_label)
    x, y = request.x, request.y
    if not request.relative:
        # Absolute coordinates are relative to the window's top-left corner.
        window = await _find_native_window(context, handle)
        x, y = window.left + x, window.top + y
    final_x, final_y = await _native(
        "simulate_mouse_movement",
        context.desktop.move_mouse,
        x=x,
        y=y,
        relative=request.relative,
        click=request.click,
        button=button,
        duration_ms=request.duration_ms,
    )
    return Envelope.ok({"x": final_x, "y": final_y, "relative": request.relative, "clicked": request.click})


_HANDLERS = {
    C.TAKE_SCREENSHOT: _take_screenshot,
    C.MANAGE_WINDOW: _manage_window,
    C.SIMULATE_TEXT_INPUT: _simulate_text_input,
    C.SIMULATE_MOUSE_MOVEMENT: _simulate_mouse_movement,
}


async def try_handle_window_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    handler = _HANDLERS.get(command)
    if handler is None:
        return None
    return await handler(payload, context)
