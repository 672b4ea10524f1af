import base64

import pytest

from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.utils.exceptions import WindowOperationError


@pytest.mark.asyncio
async def test_take_screenshot_returns_data_url(context, attach, desktop, tmp_path):
    attach(title="Main Window")
    env = await CommandDispatcher(context).dispatch(
        "take_screenshot", {"max_width": 400, "format": "png", "output_dir": str(tmp_path)}
    )
    assert env.success is True
    data = env.data
    assert data["data_url"].startswith("data:image/png;base64,")
    assert (data["width"], data["height"]) == (400, 300)
    assert base64.b64decode(data["data_url"].split(",", 1)[1])[:8] == b"\x89PNG\r\n\x1a\n"
    assert (tmp_path / data["file_path"].split("/")[-1]).exists()
    assert desktop.calls[0] == ("find_window", "Main Window", "")


@pytest.mark.asyncio
async def test_screenshot_failure_is_window_operation_error(context, attach, desktop):
    attach()
    desktop.fail_with = WindowOperationError("find_window", "no window matches 'main'")
    env = await CommandDispatcher(context).dispatch("take_screenshot", {})
    assert env.success is False
    assert env.error == "Window operation failed: find_window - no window matches 'main'"


@pytest.mark.asyncio
async def test_manage_window_accepts_camel_case_operations(context, attach, desktop):
    attach()
    env = await CommandDispatcher(context).dispatch("manage_window", {"operation": "setPosition", "x": 5, "y": 6})
    assert env.success is True
    assert env.data["operation"] == "set_position"
    assert desktop.calls[-1] == ("window_action", "set_position", {"x": 5, "y": 6})


@pytest.mark.asyncio
async def test_manage_window_validation(context, attach, desktop):
    attach()
    dispatcher = CommandDispatcher(context)
    missing = await dispatcher.dispatch("manage_window", {"operation": "set_size", "width": 100})
    assert missing.error.startswith("Invalid parameter 'width/height'")
    unknown = await dispatcher.dispatch("manage_window", {"operation": "explode"})
    assert unknown.error.startswith("Invalid parameter 'operation'")
    assert desktop.calls == []


@pytest.mark.asyncio
async def test_simulated_input(context, attach, desktop):
    attach()
    dispatcher = CommandDispatcher(context)
    typed = await dispatcher.dispatch("simulate_text_input", {"text": "hi there", "delay_ms": 5})
    assert typed.data["length"] == 8
    assert ("type_text", "hi there", 5) in desktop.calls

    moved = await dispatcher.dispatch("simulate_mouse_movement", {"x": 10, "y": 20, "click": True})
    # Absolute coordinates are offset by the window origin (100, 50).
    assert moved.data == {"x": 110, "y": 70, "relative": False, "clicked": True}
    rel = await dispatcher.dispatch("simulate_mouse_movement", {"x": -3, "y": 4, "relative": True})
    assert desktop.calls[-1] == ("move_mouse", -3, 4, True, False, "left")
    assert rel.success is True


@pytest.mark.asyncio
async def test_hot_reload_renavigates_to_current_url(context, attach):
    wv = attach(url="http://localhost:5173/")
    env = await CommandDispatcher(context).dispatch("hot_reload", {})
    assert env.data == {"message": "Window 'main' reloaded", "url": "http://localhost:5173/"}
    assert wv.emitted == [("navigate", {"url": "http://localhost:5173/"})]


@pytest.mark.asyncio
async def test_hot_reload_failure_is_folded_into_envelope(context, attach):
    wv = attach(url="http://localhost:5173/")
    wv.fail_emit = True
    env = await CommandDispatcher(context).dispatch("hot_reload", {})
    assert env.success is False
    assert env.error.startswith("Failed to reload window main: Communication error")
