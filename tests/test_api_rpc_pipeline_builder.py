import pytest

from webviewbridge.api.rpc.context_models import CommandHandlers, CommandRequest
from webviewbridge.api.rpc.dispatch_pipeline import run_handler_pipeline
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.pipeline_builder import build_command_handlers, default_command_handlers

_GROUPS = (
    "health",
    "webview",
    "console_logs",
    "error_tracker",
    "network_inspector",
    "performance",
    "devtools_bridge",
    "state_dump",
    "storage_inspector",
    "hot_reload",
    "window",
)


def _marking_handlers(calls: list[str], answer: str | None = None) -> CommandHandlers:
    def _make(name: str):
        async def _handler(**_kwargs):
            calls.append(name)
            return Envelope.ok({"handled_by": name}) if name == answer else None

        return _handler

    return CommandHandlers(**{f"try_handle_{name}_method": _make(name) for name in _GROUPS})


def test_build_command_handlers_returns_one_step_per_group(context):
    request = CommandRequest(command="ping", payload=None, context=context)
    result = build_command_handlers(request=request, handlers=default_command_handlers())
    assert isinstance(result, tuple)
    assert len(result) == len(_GROUPS)


@pytest.mark.asyncio
async def test_pipeline_builder_preserves_handler_order(context):
    calls: list[str] = []
    request = CommandRequest(command="nope", payload=None, context=context)
    pipeline = build_command_handlers(request=request, handlers=_marking_handlers(calls))
    assert await run_handler_pipeline(pipeline) is None
    assert calls == list(_GROUPS)


@pytest.mark.asyncio
async def test_pipeline_stops_at_first_answer(context):
    calls: list[str] = []
    request = CommandRequest(command="x", payload=None, context=context)
    pipeline = build_command_handlers(request=request, handlers=_marking_handlers(calls, answer="error_tracker"))
    result = await run_handler_pipeline(pipeline)
    assert result == Envelope.ok({"handled_by": "error_tracker"})
    assert calls == ["health", "webview", "console_logs", "error_tracker"]


@pytest.mark.asyncio
async def test_default_handlers_answer_ping(context):
    request = CommandRequest(command="ping", payload=None, context=context)
    result = await run_handler_pipeline(build_command_handlers(request=request, handlers=default_command_handlers()))
    assert result is not None
    assert result.data == {"value": "pong"}
