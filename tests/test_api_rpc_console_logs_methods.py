import pytest

from webviewbridge.api.dispatcher import CommandDispatcher


def _log(i: int, level: str) -> dict:
    return {"timestamp": 1_700_000_000_000 + i, "level": level, "message": f"{level} {i}", "args": []}


class _ConsoleBuffer:
    """Filters like the in-page capture script does."""

    def __init__(self, logs):
        self.logs = logs

    def __call__(self, task):
        rows = [row for row in self.logs if task["level"] is None or row["level"] == task["level"]]
        return {"logs": rows[: task["limit"]], "total_count": len(rows)}


@pytest.mark.asyncio
async def test_level_filter_end_to_end(context, attach):
    logs = [_log(i, "error") for i in range(3)] + [_log(i, "info") for i in range(3, 10)]
    attach(responders={"get-console-logs": _ConsoleBuffer(logs)})
    env = await CommandDispatcher(context).dispatch("get_console_logs", {"level": "error"})
    assert env.success is True
    assert env.data["total_count"] == 3
    assert env.data["returned_count"] == 3
    assert {row["level"] for row in env.data["logs"]} == {"error"}


@pytest.mark.asyncio
async def test_limit_caps_entries_but_keeps_total(context, attach):
    logs = [_log(i, "info") for i in range(150)]
    wv = attach(responders={"get-console-logs": lambda task: {"logs": logs, "total_count": 150}})
    env = await CommandDispatcher(context).dispatch("get_console_logs", {"limit": 50})
    assert env.data["returned_count"] == 50
    assert env.data["total_count"] == 150
    assert len(env.data["logs"]) == 50
    assert wv.tasks_for("get-console-logs") == [
        {"level": None, "start_time_ms": None, "end_time_ms": None, "limit": 50}
    ]


@pytest.mark.asyncio
async def test_level_all_means_no_filter_and_bad_level_is_rejected(context, attach):
    wv = attach(responders={"get-console-logs": lambda task: {"logs": []}})
    dispatcher = CommandDispatcher(context)
    env = await dispatcher.dispatch("get_console_logs", {"level": "ALL"})
    assert env.data == {"logs": [], "total_count": 0, "returned_count": 0}
    assert wv.tasks_for("get-console-logs")[0]["level"] is None

    bad = await dispatcher.dispatch("get_console_logs", {"level": "loud"})
    assert bad.success is False
    assert bad.error.startswith("Invalid parameter 'level'")


@pytest.mark.asyncio
async def test_remote_error_handling(context, attach):
    replies = iter([{"error": "capture not installed"}, {"error": {"code": 1}}, {"error": None, "logs": []}])
    attach(responders={"get-console-logs": lambda task: next(replies)})
    dispatcher = CommandDispatcher(context)
    assert (await dispatcher.dispatch("get_console_logs", {})).error == "capture not installed"
    assert (await dispatcher.dispatch("get_console_logs", {})).error == "Unknown error"
    assert (await dispatcher.dispatch("get_console_logs", {})).success is True


@pytest.mark.asyncio
async def test_malformed_entries_are_serialization_errors(context, attach):
    attach(responders={"get-console-logs": lambda task: {"logs": [{"level": "info"}]}})
    env = await CommandDispatcher(context).dispatch("get_console_logs", {})
    assert env.success is False
    assert env.error.startswith("Serialization error: Failed to parse console logs response")


@pytest.mark.asyncio
async def test_inject_console_capture_notifies(context, attach):
    wv = attach()
    env = await CommandDispatcher(context).dispatch("inject-console-capture", {})
    assert env.success is True
    assert wv.emitted == [("inject-console-capture", {})]
