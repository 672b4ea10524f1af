"""Pytest fixtures: in-process fake webviews and a fake desktop backend."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest
from PIL import Image

from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.config.schema import Config
from webviewbridge.desktop.backend import WindowInfo
from webviewbridge.webview.registry import WebviewHandle

Responder = Callable[[Any], Any]


class FakeWebview(WebviewHandle):
    """Answers correlated tasks through the bridge like a real page would.

    ``responders`` maps a topic to a callable taking the task and returning the
    reply body (a dict, merged with the correlation id) or None for no reply.
    """

    def __init__(self, label: str, bridge, *, responders: dict[str, Responder] | None = None, delay: float = 0.0, **kw):
        super().__init__(label, **kw)
        self.bridge = bridge
        self.responders = dict(responders or {})
        self.delay = delay
        self.emitted: list[tuple[str, Any]] = []
        self.fail_emit = False

    async def emit(self, event: str, payload: Any = None) -> None:
        if self.fail_emit:
            raise ConnectionError("socket closed")
        self.emitted.append((event, payload))
        responder = self.responders.get(event)
        if responder is None or not isinstance(payload, dict) or "correlation_id" not in payload:
            return
        body = responder(payload["task"])
        if body is None:
            return
        reply = {"correlation_id": payload["correlation_id"], **body}
        asyncio.get_running_loop().call_later(
            self.delay, self.bridge.handle_reply, self.label, f"{event}-response", reply
        )

    def tasks_for(self, topic: str) -> list[Any]:
        return [p["task"] for e, p in self.emitted if e == topic and isinstance(p, dict) and "task" in p]


class FakeDesktop:
    def __init__(self):
        self.calls: list[tuple] = []
        self.window = WindowInfo(title="Main Window", left=100, top=50, width=800, height=600, native=object())
        self.fail_with: Exception | None = None

    def find_window(self, *, title: str = "", application_name: str = "") -> WindowInfo:
        self.calls.append(("find_window", title, application_name))
        if self.fail_with is not None:
            raise self.fail_with
        return self.window

    def capture(self, window: WindowInfo) -> Image.Image:
        self.calls.append(("capture", window.title))
        return Image.new("RGB", (window.width, window.height), (30, 120, 200))

    def window_action(self, window: WindowInfo, operation: str, **params: Any) -> None:
        self.calls.append(("window_action", operation, params))

    def type_text(self, text: str, *, delay_ms: int = 20) -> None:
        self.calls.append(("type_text", text, delay_ms))

    def move_mouse(self, *, x: int, y: int, relative: bool = False, click: bool = False, button: str = "left", duration_ms: int = 0):
        self.calls.append(("move_mouse", x, y, relative, click, button))
        return x, y


@pytest.fixture
def desktop() -> FakeDesktop:
    return FakeDesktop()


@pytest.fixture
def context(desktop) -> CommandContext:
    return CommandContext.create(config=Config(), desktop=desktop)


@pytest.fixture
def attach(context) -> Callable[..., FakeWebview]:
    """Register a FakeWebview on the shared context."""

    def _attach(label: str = "main", **kw: Any) -> FakeWebview:
        handle = FakeWebview(label, context.bridge, **kw)
        context.registry.register(handle)
        return handle

    return _attach


@pytest.fixture
def webview_cls() -> type[FakeWebview]:
    """The fake handle class, for tests that wire their own registry."""
    return FakeWebview
