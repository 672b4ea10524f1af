"""Handler for hot_reload."""

from __future__ import annotations

from typing import Any

from loguru import logger

from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.handler_utils import WindowRequest, parse_request, resolve_window
from webviewbridge.bridge import protocol as P
from webviewbridge.utils.exceptions import CommunicationError


async def try_handle_hot_reload_method(
    *,
    command: str,
    payload: Any,
    context: CommandContext,
) -> Envelope | None:
    """Re-navigate the webview to the url it currently shows.

    A failed navigation is reported in the envelope rather than raised.
    """
    if command != C.HOT_RELOAD:
        return None
    request = parse_request(WindowRequest, payload, command=command)
    label = request.window_label
    handle = resolve_window(context, label)
    url = handle.url
    if not url:
        return Envelope.fail(f"Failed to reload window {label}: current URL is unknown")
    try:
        await handle.navigate(url)
    except Exception as e:
        error = CommunicationError(f"Failed to emit {P.TOPIC_NAVIGATE} event", context=f"window: {label}, error: {e}")
        logger.warning("Hot reload of {} failed: {}", label, error)
        return Envelope.fail(f"Failed to reload window {label}: {error}")
    logger.info("Hot reloaded {} at {}", label, url)
    return Envelope.ok({"message": f"Window '{label}' reloaded", "url": url})
