"""Frames exchanged with attached webviews."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from webviewbridge.utils.exceptions import SerializationError

REPLY_SUFFIX = "-response"

# Request/reply topics: the webview answers each on "<topic>-response".
TOPIC_EXECUTE_JS = "execute-js"
TOPIC_GET_CONSOLE_LOGS = "get-console-logs"
TOPIC_GET_EXCEPTIONS = "get-exceptions"
TOPIC_GET_NETWORK_REQUESTS = "get-network-requests"
TOPIC_INSPECT_STORAGE = "inspect-storage"
TOPIC_GET_DOM = "got-dom-content"
TOPIC_LOCAL_STORAGE = "get-local-storage"
TOPIC_ELEMENT_POSITION = "get-element-position"
TOPIC_SEND_TEXT = "send-text-to-element"

# Fire-and-forget topics.
TOPIC_INJECT_CONSOLE_CAPTURE = "inject-console-capture"
TOPIC_INJECT_ERROR_TRACKER = "inject-error-tracker"
TOPIC_CLEAR_EXCEPTIONS = "clear-exceptions"
TOPIC_INJECT_NETWORK_CAPTURE = "inject-network-capture"
TOPIC_CLEAR_NETWORK_REQUESTS = "clear-network-requests"
TOPIC_START_NETWORK_CAPTURE = "start-network-capture"
TOPIC_STOP_NETWORK_CAPTURE = "stop-network-capture"
TOPIC_NAVIGATE = "navigate"


@dataclass(slots=True)
class TaskFrame:
    """One task published to a webview."""

    correlation_id: str
    topic: str
    task: Any

    @property
    def reply_topic(self) -> str:
        return reply_topic_for(self.topic)


@dataclass(slots=True)
class ReplyFrame:
    """One reply received from a webview, with the correlation id stripped."""

    correlation_id: str
    topic: str
    body: dict[str, Any]
    raw: str


def reply_topic_for(topic: str) -> str:
    return f"{topic}{REPLY_SUFFIX}"


def encode_task(frame: TaskFrame) -> dict[str, Any]:
    """Payload published under ``frame.topic``."""
    return {"correlation_id": frame.correlation_id, "task": frame.task}


def decode_reply_frame(topic: str, payload: Any) -> ReplyFrame:
    """Strictly decode a reply payload.

    Accepts a JSON object or its text form; anything else, or an object
    without a string ``correlation_id``, is rejected.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise SerializationError(f"reply on {topic} is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise SerializationError(f"reply on {topic} must be a JSON object, got {type(payload).__name__}")
    correlation_id = payload.get("correlation_id")
    if not isinstance(correlation_id, str) or not correlation_id:
        raise SerializationError(f"reply on {topic} is missing correlation_id")
    body = {k: v for k, v in payload.items() if k != "correlation_id"}
    return ReplyFrame(
        correlation_id=correlation_id,
        topic=topic,
        body=body,
        raw=json.dumps(body, ensure_ascii=False),
    )
