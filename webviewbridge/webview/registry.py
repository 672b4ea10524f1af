"""In-memory registry of attached webviews, keyed by logical label."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from loguru import logger

from webviewbridge.utils.helpers import now_ms


class WebviewHandle:
    """A live, addressable webview.

    Subclasses provide the transport; the bridge only needs ``emit``.
    """

    def __init__(self, label: str, *, title: str = "", url: str = ""):
        self.label = label
        self.title = title
        self.url = url
        self.attached_at_ms = now_ms()

    async def emit(self, event: str, payload: Any = None) -> None:
        raise NotImplementedError

    async def navigate(self, url: str) -> None:
        """Ask the webview to load ``url``."""
        await self.emit("navigate", {"url": url})
        self.url = url

    def describe(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "title": self.title,
            "url": self.url,
            "attached_at_ms": self.attached_at_ms,
        }


class WebSocketWebviewHandle(WebviewHandle):
    """Webview attached over the /ws/webview endpoint."""

    def __init__(self, label: str, *, websocket: Any, conn_id: str, title: str = "", url: str = ""):
        super().__init__(label, title=title, url=url)
        self.websocket = websocket
        self.conn_id = conn_id
        self._send_lock = asyncio.Lock()

    async def emit(self, event: str, payload: Any = None) -> None:
        async with self._send_lock:
            await self.websocket.send_json({"type": "event", "event": event, "payload": payload})


DetachListener = Callable[[str, str], Awaitable[Any] | Any]


@dataclass
class WebviewRegistry:
    """Tracks attached webviews.

    Handlers resolve a label per request and never keep the handle across
    requests, since a webview may detach and re-attach under the same label.
    """

    _handles: dict[str, WebviewHandle] = field(default_factory=dict)
    _detach_listeners: list[DetachListener] = field(default_factory=list)

    def register(self, handle: WebviewHandle) -> WebviewHandle | None:
        """Attach ``handle`` under its label, returning the handle it replaced."""
        previous = self._handles.get(handle.label)
        self._handles[handle.label] = handle
        logger.info("Webview attached: label={} title={!r} url={}", handle.label, handle.title, handle.url)
        return previous

    async def unregister(self, label: str, *, handle: WebviewHandle | None = None, reason: str = "detached") -> bool:
        """Detach the webview under ``label``.

        When ``handle`` is given the entry is only removed if it is still that
        handle, so a stale connection closing cannot evict its replacement.
        """
        current = self._handles.get(label)
        if current is None or (handle is not None and current is not handle):
            return False
        del self._handles[label]
        logger.info("Webview detached: label={} reason={}", label, reason)
        for listener in list(self._detach_listeners):
            outcome = listener(label, reason)
            if inspect.isawaitable(outcome):
                await outcome
        return True

    def add_detach_listener(self, listener: DetachListener) -> None:
        self._detach_listeners.append(listener)

    def get(self, label: str) -> WebviewHandle | None:
        return self._handles.get(label)

    def contains(self, label: str) -> bool:
        return label in self._handles

    def labels(self) -> list[str]:
        return sorted(self._handles)

    def list_attached(self) -> list[WebviewHandle]:
        return sorted(self._handles.values(), key=lambda h: h.attached_at_ms, reverse=True)

    def __len__(self) -> int:
        return len(self._handles)
