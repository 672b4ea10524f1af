import pytest

from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.api.rpc import commands as C
from webviewbridge.api.rpc.commands import ALL_COMMANDS, normalize_command_name
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.config.schema import Config
from webviewbridge.webview.registry import WebviewRegistry


def test_normalize_command_name():
    assert normalize_command_name("Get-Console-Logs") == "get_console_logs"
    assert len(set(ALL_COMMANDS)) == 23


@pytest.mark.asyncio
async def test_unknown_command_names_command_as_received(context):
    env = await CommandDispatcher(context).dispatch("Frobnicate-Thing", {})
    assert env.success is False
    assert env.error == "Unknown command: Frobnicate-Thing"


@pytest.mark.asyncio
async def test_ping_echoes_value(context):
    dispatcher = CommandDispatcher(context)
    assert (await dispatcher.dispatch("ping", None)).data == {"value": "pong"}
    assert (await dispatcher.dispatch("ping", {"value": 42})).data == {"value": 42}


@pytest.mark.asyncio
async def test_health_check_works_without_any_webview(context):
    env = await CommandDispatcher(context).dispatch("health-check", None)
    assert env.success is True
    data = env.data
    assert data["status"] == "healthy"
    assert data["connection_status"]["socket_server_running"] is True
    assert data["webview_status"]["webview_available"] is False
    assert "execute_js" in data["capabilities"]
    assert "ping" not in data["capabilities"]


@pytest.mark.asyncio
async def test_hyphen_and_underscore_names_route_identically(context, attach):
    attach(responders={"get-console-logs": lambda task: {"logs": [], "total_count": 0}})
    dispatcher = CommandDispatcher(context)
    a = await dispatcher.dispatch("get-console-logs", {})
    b = await dispatcher.dispatch("get_console_logs", {})
    assert a == b
    assert a.success is True


@pytest.mark.asyncio
async def test_missing_window_becomes_failure_envelope(context):
    env = await CommandDispatcher(context).dispatch("execute_js", {"code": "1", "window_label": "ghost"})
    assert env.success is False
    assert "ghost" in env.error
    assert env.error == "Window not found: ghost"


@pytest.mark.asyncio
async def test_empty_window_label_defaults_to_main(context, attach):
    attach(responders={"execute-js": lambda code: {"success": True, "result": 2}})
    env = await CommandDispatcher(context).dispatch("execute_js", {"code": "1+1", "window_label": ""})
    assert env.success is True
    assert env.data == {"result": 2, "type": "int"}


@pytest.mark.asyncio
async def test_non_object_payload_is_serialization_error(context, attach):
    attach()
    env = await CommandDispatcher(context).dispatch("get_dom", [1, 2])
    assert env.success is False
    assert env.error.startswith("Serialization error: Invalid payload for get_dom")


@pytest.mark.asyncio
async def test_unexpected_exception_is_wrapped(context):
    async def _explode(**_kw):
        raise RuntimeError("kaput")

    dispatcher = CommandDispatcher(context)
    dispatcher.handlers.try_handle_health_method = _explode
    env = await dispatcher.dispatch("ping", None)
    assert env.success is False
    assert env.error == "kaput"


@pytest.mark.asyncio
async def test_timeout_surfaces_as_failure_envelope(context, attach):
    attach()
    env = await CommandDispatcher(context).dispatch("get_dom", {"timeout_ms": 30})
    assert env.success is False
    assert env.error == "Operation timed out: DOM retrieval (exceeded 30ms)"


@pytest.mark.asyncio
async def test_context_keeps_the_registry_it_was_given(desktop, webview_cls):
    registry = WebviewRegistry()
    ctx = CommandContext.create(config=Config(), desktop=desktop, registry=registry)
    assert ctx.registry is registry
    registry.register(webview_cls("main", ctx.bridge, responders={"execute-js": lambda code: {"success": True, "result": 3}}))
    env = await CommandDispatcher(ctx).dispatch("execute_js", {"code": "1+2"})
    assert env.success is True
    assert env.data["result"] == 3


_MINIMAL_PAYLOADS = {
    C.TAKE_SCREENSHOT: {},
    C.GET_DOM: {},
    C.MANAGE_LOCAL_STORAGE: {},
    C.EXECUTE_JS: {"code": "1"},
    C.MANAGE_WINDOW: {"operation": "focus"},
    C.SIMULATE_TEXT_INPUT: {"text": "hi"},
    C.SIMULATE_MOUSE_MOVEMENT: {"x": 1, "y": 2},
    C.GET_ELEMENT_POSITION: {"selector_value": "#go"},
    C.SEND_TEXT_TO_ELEMENT: {"selector_value": "#name", "text": "x"},
    C.HOT_RELOAD: {},
    C.GET_CONSOLE_LOGS: {},
    C.INJECT_CONSOLE_CAPTURE: {},
    C.NETWORK_INSPECTOR: {"action": "get_requests"},
    C.INJECT_NETWORK_CAPTURE: {},
    C.STATE_DUMP: {},
    C.DEVTOOLS_BRIDGE: {},
    C.GET_EXCEPTIONS: {},
    C.INJECT_ERROR_TRACKER: {},
    C.CLEAR_EXCEPTIONS: {},
    C.GET_PERFORMANCE_METRICS: {},
    C.STORAGE_INSPECTOR: {"action": "list_indexeddb"},
}


def test_every_window_command_has_a_minimal_payload():
    assert set(_MINIMAL_PAYLOADS) == set(ALL_COMMANDS) - {C.PING, C.HEALTH_CHECK}


@pytest.mark.asyncio
@pytest.mark.parametrize("command", sorted(_MINIMAL_PAYLOADS))
async def test_every_window_command_reports_missing_window(context, attach, command):
    attach("main")
    dispatcher = CommandDispatcher(context)
    env = await dispatcher.dispatch(command, {**_MINIMAL_PAYLOADS[command], "window_label": "ghost"})
    assert env.success is False
    assert env.data is None
    assert env.error == "Window not found: ghost"


@pytest.mark.asyncio
@pytest.mark.parametrize("command", sorted(_MINIMAL_PAYLOADS))
async def test_omitted_window_label_targets_main(context, command):
    env = await CommandDispatcher(context).dispatch(command, dict(_MINIMAL_PAYLOADS[command]))
    assert env.success is False
    assert env.data is None
    assert env.error == "Window not found: main"
