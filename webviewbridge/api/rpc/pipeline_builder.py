"""Build ordered command dispatch handler pipelines."""

from __future__ import annotations

from webviewbridge.api.rpc.console_logs_methods import try_handle_console_logs_method
from webviewbridge.api.rpc.context_models import CommandHandlers, CommandRequest
from webviewbridge.api.rpc.devtools_bridge_methods import try_handle_devtools_bridge_method
from webviewbridge.api.rpc.dispatch_pipeline import DispatchHandler
from webviewbridge.api.rpc.error_tracker_methods import try_handle_error_tracker_method
from webviewbridge.api.rpc.health_methods import try_handle_health_method
from webviewbridge.api.rpc.hot_reload_methods import try_handle_hot_reload_method
from webviewbridge.api.rpc.network_inspector_methods import try_handle_network_inspector_method
from webviewbridge.api.rpc.performance_methods import try_handle_performance_method
from webviewbridge.api.rpc.state_dump_methods import try_handle_state_dump_method
from webviewbridge.api.rpc.storage_inspector_methods import try_handle_storage_inspector_method
from webviewbridge.api.rpc.webview_methods import try_handle_webview_method
from webviewbridge.api.rpc.window_methods import try_handle_window_method


def default_command_handlers() -> CommandHandlers:
    """The handler set served by the dispatcher."""
    return CommandHandlers(
        try_handle_health_method=try_handle_health_method,
        try_handle_webview_method=try_handle_webview_method,
        try_handle_console_logs_method=try_handle_console_logs_method,
        try_handle_error_tracker_method=try_handle_error_tracker_method,
        try_handle_network_inspector_method=try_handle_network_inspector_method,
        try_handle_performance_method=try_handle_performance_method,
        try_handle_devtools_bridge_method=try_handle_devtools_bridge_method,
        try_handle_state_dump_method=try_handle_state_dump_method,
        try_handle_storage_inspector_method=try_handle_storage_inspector_method,
        try_handle_hot_reload_method=try_handle_hot_reload_method,
        try_handle_window_method=try_handle_window_method,
    )


def build_command_handlers(
    *,
    request: CommandRequest,
    handlers: CommandHandlers,
) -> tuple[DispatchHandler, ...]:
    """Create ordered handlers tuple for one dispatch.

    Health comes first so it answers even when no webview is attached.
    """
    h = handlers
    m = request.command
    p = request.payload
    ctx = request.context
    return (
        lambda: h.try_handle_health_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_webview_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_console_logs_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_error_tracker_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_network_inspector_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_performance_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_devtools_bridge_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_state_dump_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_storage_inspector_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_hot_reload_method(command=m, payload=p, context=ctx),
        lambda: h.try_handle_window_method(command=m, payload=p, context=ctx),
    )
