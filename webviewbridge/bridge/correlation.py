"""Publish one task into a webview and await its single correlated reply."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from loguru import logger

from webviewbridge.bridge.protocol import TaskFrame, decode_reply_frame, encode_task
from webviewbridge.utils.exceptions import (
    BridgeTimeoutError,
    CommunicationError,
    SerializationError,
    WindowNotFoundError,
)
from webviewbridge.webview.registry import WebviewHandle, WebviewRegistry


@dataclass(slots=True)
class PendingCorrelation:
    """One in-flight call waiting for its reply."""

    correlation_id: str
    label: str
    reply_topic: str
    future: asyncio.Future[str]
    deadline: float


class CorrelationBridge:
    """Request/single-reply broker between handlers and attached webviews.

    Every call mints its own correlation id and registers its future before
    the task is published, so a fast reply cannot be missed and concurrent
    calls on the same topic never see each other's replies.
    """

    def __init__(self, registry: WebviewRegistry):
        self.registry = registry
        self._pending: dict[str, PendingCorrelation] = {}
        registry.add_detach_listener(self.fail_pending_for)

    def resolve(self, label: str) -> WebviewHandle:
        handle = self.registry.get(label)
        if handle is None:
            raise WindowNotFoundError(label)
        return handle

    async def call(
        self,
        label: str,
        topic: str,
        task: Any,
        *,
        timeout_ms: int,
        operation: str | None = None,
    ) -> str:
        """Publish ``task`` under ``topic`` and return the raw reply text."""
        handle = self.resolve(label)
        operation = operation or topic
        correlation_id = uuid4().hex
        frame = TaskFrame(correlation_id=correlation_id, topic=topic, task=task)
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[str] = loop.create_future()
        pending = PendingCorrelation(
            correlation_id=correlation_id,
            label=label,
            reply_topic=frame.reply_topic,
            future=fut,
            deadline=loop.time() + max(1, timeout_ms) / 1000.0,
        )
        self._pending[correlation_id] = pending
        try:
            # The deadline covers publishing as well as the reply.
            async with asyncio.timeout_at(pending.deadline):
                await self._publish(handle, topic, encode_task(frame))
                logger.debug("Bridge call {} published on {} to {}", correlation_id, topic, label)
                return await fut
        except TimeoutError:
            logger.warning("Bridge call {} on {} to {} timed out after {}ms", correlation_id, topic, label, timeout_ms)
            raise BridgeTimeoutError(operation, timeout_ms) from None
        finally:
            self._pending.pop(correlation_id, None)

    async def notify(self, label: str, topic: str, payload: Any = None) -> None:
        """Fire-and-forget publish; no reply is expected."""
        handle = self.resolve(label)
        await self._publish(handle, topic, payload)
        logger.debug("Bridge notify {} sent to {}", topic, label)

    async def _publish(self, handle: WebviewHandle, topic: str, payload: Any) -> None:
        try:
            await handle.emit(topic, payload)
        except Exception as e:
            raise CommunicationError(
                f"Failed to emit {topic} event",
                context=f"window: {handle.label}, error: {e}",
            ) from e

    def handle_reply(self, label: str, event: str, payload: Any) -> bool:
        """Route a reply from webview ``label``; return True if it completed a call."""
        try:
            reply = decode_reply_frame(event, payload)
        except SerializationError as e:
            logger.warning("Dropping reply from {} on {}: {}", label, event, e)
            return False
        pending = self._pending.get(reply.correlation_id)
        if pending is None:
            logger.debug("Dropping stale or unknown reply {} on {} from {}", reply.correlation_id, event, label)
            return False
        if pending.label != label or pending.reply_topic != event:
            logger.warning(
                "Dropping reply {} from {} on {}: expected {} on {}",
                reply.correlation_id,
                label,
                event,
                pending.label,
                pending.reply_topic,
            )
            return False
        if pending.future.done():
            return False
        pending.future.set_result(reply.raw)
        return True

    def fail_pending_for(self, label: str, reason: str = "detached") -> int:
        """Fail every call waiting on ``label``; used when a webview detaches."""
        failed = 0
        for pending in list(self._pending.values()):
            if pending.label != label or pending.future.done():
                continue
            pending.future.set_exception(
                CommunicationError(
                    f"Window {label} went away while waiting for {pending.reply_topic}",
                    context=reason,
                )
            )
            failed += 1
        return failed

    def pending_count(self, label: str | None = None) -> int:
        if label is None:
            return len(self._pending)
        return sum(1 for p in self._pending.values() if p.label == label)
