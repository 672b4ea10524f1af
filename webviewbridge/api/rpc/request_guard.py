"""Validation of raw client frames before dispatch."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from webviewbridge.api.rpc.envelope import Envelope


@dataclass(slots=True)
class CommandFrameResult:
    """Decoded client frame, or the envelope to answer with instead."""

    command: str | None
    payload: Any
    error: Envelope | None


def prepare_command_frame(raw: str | bytes) -> CommandFrameResult:
    """Decode one ``{"command": str, "payload": any}`` line."""
    try:
        frame = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return CommandFrameResult(command=None, payload=None, error=Envelope.fail(f"Invalid JSON frame: {e}"))
    if not isinstance(frame, dict):
        return CommandFrameResult(
            command=None,
            payload=None,
            error=Envelope.fail("Invalid frame: expected a JSON object"),
        )
    command = frame.get("command")
    if not isinstance(command, str) or not command.strip():
        return CommandFrameResult(
            command=None,
            payload=None,
            error=Envelope.fail("Invalid frame: command is required"),
        )
    return CommandFrameResult(command=command, payload=frame.get("payload"), error=None)
