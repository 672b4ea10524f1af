"""Helpers shared by command handlers: payload decoding, window resolution and reply folding."""

from __future__ import annotations

import json
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.utils.exceptions import SerializationError, WindowNotFoundError
from webviewbridge.webview.registry import WebviewHandle

DEFAULT_WINDOW_LABEL = "main"

ModelT = TypeVar("ModelT", bound=BaseModel)


class WindowRequest(BaseModel):
    """Base payload for every command aimed at a webview."""

    model_config = ConfigDict(extra="ignore")

    window_label: str = DEFAULT_WINDOW_LABEL

    @field_validator("window_label", mode="before")
    @classmethod
    def _default_label(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_WINDOW_LABEL
        return value


class BridgeRequest(WindowRequest):
    """Payload for commands that wait on a correlated reply."""

    timeout_ms: int | None = Field(default=None, gt=0)


def parse_request(model: type[ModelT], payload: Any, *, command: str) -> ModelT:
    """Decode ``payload`` into ``model``; a missing payload is an empty object."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise SerializationError(
            f"Invalid payload for {command}: expected a JSON object, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise SerializationError(f"Invalid payload for {command}: {e}") from e


def resolve_window(context: CommandContext, label: str) -> WebviewHandle:
    """Look the webview up for this request only."""
    handle = context.registry.get(label)
    if handle is None:
        raise WindowNotFoundError(label)
    return handle


def bridge_timeout(request: BridgeRequest, default_ms: int) -> int:
    return request.timeout_ms or default_ms


def decode_reply(raw: str, *, what: str) -> dict[str, Any]:
    """Parse reply text; only a JSON object is accepted."""
    try:
        value = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise SerializationError(f"Failed to parse {what} response: {e}") from e
    if not isinstance(value, dict):
        raise SerializationError(f"Failed to parse {what} response: expected an object, got {type(value).__name__}")
    return value


def remote_error(reply: dict[str, Any]) -> str | None:
    """Application level error reported by the webview, if any."""
    error = reply.get("error")
    if error is not None:
        return error if isinstance(error, str) else "Unknown error"
    if reply.get("success") is False:
        return "Unknown error"
    return None


def validate_entries(model: type[ModelT], rows: Any, *, what: str) -> list[ModelT]:
    """Strictly validate a list of reply entries."""
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise SerializationError(f"Failed to parse {what} response: entries must be a list")
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as e:
        raise SerializationError(f"Failed to parse {what} response: {e}") from e


def cap_entries(entries: list[ModelT], *, reported_total: Any, limit: int) -> tuple[list[ModelT], int]:
    """Apply ``limit`` and work out the total the client should see."""
    total = reported_total if isinstance(reported_total, int) and reported_total >= len(entries) else len(entries)
    return entries[:limit], total


def parse_script_result(reply: dict[str, Any], *, what: str, label: str) -> Envelope:
    """Fold an ``execute-js`` reply carrying a JSON string result into an envelope."""
    err = remote_error(reply)
    if err is not None:
        return Envelope.fail(err)
    if "result" not in reply or reply["result"] is None:
        return Envelope.fail(f"No result in {what} response")
    result = reply["result"]
    if not isinstance(result, str):
        return Envelope.fail(f"{what[:1].upper()}{what[1:]} result is not a string")
    try:
        parsed = json.loads(result)
    except json.JSONDecodeError as e:
        logger.info("Failed to parse {} result from {}: {}", what, label, e)
        return Envelope.ok({"raw_result": result, "parse_error": str(e)})
    if isinstance(parsed, dict) and isinstance(parsed.get("error"), str) and len(parsed) == 1:
        return Envelope.fail(parsed["error"])
    logger.info("{} retrieved from {}", what, label)
    return Envelope.ok(parsed)
