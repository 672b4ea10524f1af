"""Closed catalogue of command names accepted by the dispatcher."""

from __future__ import annotations

PING = "ping"
HEALTH_CHECK = "health_check"
TAKE_SCREENSHOT = "take_screenshot"
GET_DOM = "get_dom"
MANAGE_LOCAL_STORAGE = "manage_local_storage"
EXECUTE_JS = "execute_js"
MANAGE_WINDOW = "manage_window"
SIMULATE_TEXT_INPUT = "simulate_text_input"
SIMULATE_MOUSE_MOVEMENT = "simulate_mouse_movement"
GET_ELEMENT_POSITION = "get_element_position"
SEND_TEXT_TO_ELEMENT = "send_text_to_element"
HOT_RELOAD = "hot_reload"
GET_CONSOLE_LOGS = "get_console_logs"
INJECT_CONSOLE_CAPTURE = "inject_console_capture"
NETWORK_INSPECTOR = "network_inspector"
INJECT_NETWORK_CAPTURE = "inject_network_capture"
STATE_DUMP = "state_dump"
DEVTOOLS_BRIDGE = "devtools_bridge"
GET_EXCEPTIONS = "get_exceptions"
INJECT_ERROR_TRACKER = "inject_error_tracker"
CLEAR_EXCEPTIONS = "clear_exceptions"
GET_PERFORMANCE_METRICS = "get_performance_metrics"
STORAGE_INSPECTOR = "storage_inspector"

ALL_COMMANDS: tuple[str, ...] = (
    PING,
    HEALTH_CHECK,
    TAKE_SCREENSHOT,
    GET_DOM,
    MANAGE_LOCAL_STORAGE,
    EXECUTE_JS,
    MANAGE_WINDOW,
    SIMULATE_TEXT_INPUT,
    SIMULATE_MOUSE_MOVEMENT,
    GET_ELEMENT_POSITION,
    SEND_TEXT_TO_ELEMENT,
    HOT_RELOAD,
    GET_CONSOLE_LOGS,
    INJECT_CONSOLE_CAPTURE,
    NETWORK_INSPECTOR,
    INJECT_NETWORK_CAPTURE,
    STATE_DUMP,
    DEVTOOLS_BRIDGE,
    GET_EXCEPTIONS,
    INJECT_ERROR_TRACKER,
    CLEAR_EXCEPTIONS,
    GET_PERFORMANCE_METRICS,
    STORAGE_INSPECTOR,
)


def normalize_command_name(name: str) -> str:
    """Canonical form: lower case with underscores (``get-console-logs`` -> ``get_console_logs``)."""
    return name.strip().lower().replace("-", "_")
