import json

import pytest

from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.api.rpc.handler_utils import parse_script_result
from webviewbridge.tasks import render
from webviewbridge.tasks.devtools_script import build_devtools_script
from webviewbridge.tasks.state_dump_script import LIBRARIES_CHECKED, build_state_dump_script


def test_render_splices_json_literals():
    assert render("const A = /*%a%*/; const B = /*%b%*/;", a="x'y", b=None) == 'const A = "x\'y"; const B = null;'


def test_scripts_embed_parameters_and_cycle_markers():
    script = build_state_dump_script(max_depth=3, path="user.profile")
    assert "const MAX_DEPTH = 3;" in script
    assert '"user.profile"' in script
    assert "[Circular Reference]" in script
    assert "const MAX_DEPTH = 7;" in build_devtools_script(max_depth=7, component_filter="Nav")


def test_marker_text_inside_a_value_is_not_expanded():
    path = "a/*%libraries_checked%*/"
    script = build_state_dump_script(max_depth=3, path=path)
    assert json.dumps(path) in script
    assert script.count(json.dumps(LIBRARIES_CHECKED)) == 1
    assert render("/*%a%*/ /*%b%*/", a="/*%b%*/", b=1) == '"/*%b%*/" 1'


def test_serializer_counts_string_length_toward_size_limit():
    script = build_state_dump_script(max_depth=3, path=None)
    assert "currentSize += text.length" in script
    assert "const MAX_SIZE = 1000000;" in script


@pytest.mark.parametrize(
    "reply, expected",
    [
        ({"error": "ReferenceError"}, (False, "ReferenceError")),
        ({"success": True}, (False, "No result in devtools response")),
        ({"result": None}, (False, "No result in devtools response")),
        ({"result": 5}, (False, "Devtools result is not a string")),
        ({"result": json.dumps({"error": "no framework"})}, (False, "no framework")),
    ],
)
def test_parse_script_result_failures(reply, expected):
    env = parse_script_result(reply, what="devtools", label="main")
    assert (env.success, env.error) == expected


def test_parse_script_result_keeps_unparseable_text():
    env = parse_script_result({"result": "{not json"}, what="devtools", label="main")
    assert env.success is True
    assert env.data["raw_result"] == "{not json"
    assert env.data["parse_error"]


@pytest.mark.asyncio
async def test_devtools_bridge_passes_cycle_safe_tree_through(context, attach):
    tree = {
        "framework": "react",
        "components": [{"name": "App", "props": {"self": "[Circular Reference]"}, "children": []}],
        "metadata": {"max_depth_reached": True, "total_components": 1, "truncated": False, "errors": []},
    }
    wv = attach(responders={"execute-js": lambda code: {"success": True, "result": json.dumps(tree)}})
    env = await CommandDispatcher(context).dispatch("devtools_bridge", {"max_depth": 2})
    assert env.data == tree
    assert "const MAX_DEPTH = 2;" in wv.tasks_for("execute-js")[0]


@pytest.mark.asyncio
async def test_devtools_bridge_rejects_out_of_range_depth(context, attach):
    attach()
    env = await CommandDispatcher(context).dispatch("devtools_bridge", {"max_depth": 1000})
    assert env.success is False
    assert env.error.startswith("Serialization error: Invalid payload for devtools_bridge")


@pytest.mark.asyncio
async def test_state_dump_and_performance_metrics(context, attach):
    state = {"state": {"zustand": {"count": 1}}, "detected_libraries": ["zustand"], "metadata": {"truncated": False}}
    metrics = {"navigation": {"dom_content_loaded_ms": 12.5}}
    results = iter([json.dumps(state), json.dumps(metrics)])
    wv = attach(responders={"execute-js": lambda code: {"result": next(results)}})
    dispatcher = CommandDispatcher(context)
    assert (await dispatcher.dispatch("state_dump", {"path": "zustand"})).data == state
    perf = await dispatcher.dispatch(
        "get_performance_metrics",
        {"include_long_tasks": True, "resource_filter": {"resource_type": ["script"], "url_pattern": "cdn"}},
    )
    assert perf.data == metrics
    script = wv.tasks_for("execute-js")[1]
    assert '"long_tasks": true' in script
    assert '"resource_type": ["script"]' in script


@pytest.mark.asyncio
async def test_webview_script_commands(context, attach):
    wv = attach(
        responders={
            "execute-js": lambda code: {"success": False, "error": "SyntaxError"} if code == "(" else {"success": True, "result": [1]},
            "got-dom-content": lambda task: {"domContent": "<html></html>"},
            "get-local-storage": lambda task: {"data": {"theme": "dark"}},
        }
    )
    dispatcher = CommandDispatcher(context)
    assert (await dispatcher.dispatch("execute_js", {"code": "("})).error == "SyntaxError"
    assert (await dispatcher.dispatch("execute_js", {"code": "[1]"})).data == {"result": [1], "type": "list"}
    assert (await dispatcher.dispatch("get_dom", {})).data == {"dom_content": "<html></html>", "length": 13}
    assert (await dispatcher.dispatch("manage_local_storage", {"action": "keys"})).data == {"theme": "dark"}
    bad = await dispatcher.dispatch("manage_local_storage", {"action": "set"})
    assert bad.error.startswith("Invalid parameter 'key'")
    assert len(wv.tasks_for("get-local-storage")) == 1


@pytest.mark.asyncio
async def test_element_position_and_send_text(context, attach):
    wv = attach(
        responders={
            "get-element-position": lambda task: {"x": 10, "y": 20, "width": 100, "height": 30},
            "send-text-to-element": lambda task: {"success": True},
        }
    )
    dispatcher = CommandDispatcher(context)
    pos = await dispatcher.dispatch(
        "get_element_position", {"selector_type": "CSS", "selector_value": "#go", "should_click": True}
    )
    assert pos.data == {"x": 10, "y": 20, "width": 100, "height": 30, "clicked": True}
    sent = await dispatcher.dispatch("send_text_to_element", {"selector_value": "input", "text": "hello"})
    assert sent.data["length"] == 5
    assert wv.tasks_for("send-text-to-element")[0]["delay_ms"] == 20
    bad = await dispatcher.dispatch("get_element_position", {"selector_type": "shadow", "selector_value": "x"})
    assert bad.error.startswith("Invalid parameter 'selector_type'")
