"""Single entry point turning ``(command, payload)`` into an envelope."""

from __future__ import annotations

import time
from typing import Any

from loguru import logger

from webviewbridge.api.rpc.commands import normalize_command_name
from webviewbridge.api.rpc.context_models import CommandContext, CommandHandlers, CommandRequest
from webviewbridge.api.rpc.dispatch_pipeline import run_handler_pipeline
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.error_boundary import (
    bridge_error_result,
    unhandled_exception_result,
    unknown_command_result,
)
from webviewbridge.api.rpc.pipeline_builder import build_command_handlers, default_command_handlers
from webviewbridge.utils.exceptions import BridgeError
from webviewbridge.utils.helpers import preview_text


class CommandDispatcher:
    """Routes commands to handlers; ``dispatch`` never raises."""

    def __init__(self, context: CommandContext, handlers: CommandHandlers | None = None):
        self.context = context
        self.handlers = handlers or default_command_handlers()

    async def dispatch(self, command: str, payload: Any = None) -> Envelope:
        limit = self.context.config.logging.preview_chars
        name = normalize_command_name(command) if isinstance(command, str) else ""
        logger.info("Command {} received, payload={}", name or command, preview_text(payload, limit))
        started = time.monotonic()
        try:
            request = CommandRequest(command=name, payload=payload, context=self.context)
            result = await run_handler_pipeline(build_command_handlers(request=request, handlers=self.handlers))
            envelope = result if result is not None else unknown_command_result(command=command)
        except BridgeError as e:
            envelope = bridge_error_result(command=name, exc=e, log_warning=logger.warning)
        except Exception as e:
            envelope = unhandled_exception_result(command=name, exc=e, log_exception=logger.exception)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        if envelope.success:
            logger.info(
                "Command {} succeeded in {}ms, data={}",
                name,
                elapsed_ms,
                preview_text(envelope.data, limit),
            )
        else:
            logger.info("Command {} failed in {}ms: {}", name or command, elapsed_ms, envelope.error)
        return envelope
