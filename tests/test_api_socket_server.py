import asyncio
import json

import pytest

from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.api.rpc.request_guard import prepare_command_frame
from webviewbridge.api.socket_server import CommandSocketServer
from webviewbridge.config.schema import ServerConfig


@pytest.mark.parametrize(
    "line, error",
    [
        (b"{nope", "Invalid JSON frame"),
        (b"[1]", "Invalid frame: expected a JSON object"),
        (b'{"payload": {}}', "Invalid frame: command is required"),
        (b'{"command": "  "}', "Invalid frame: command is required"),
    ],
)
def test_prepare_command_frame_rejects_bad_frames(line, error):
    result = prepare_command_frame(line)
    assert result.command is None
    assert result.error.error.startswith(error)


def test_prepare_command_frame_accepts_missing_payload():
    result = prepare_command_frame('{"command": "ping"}')
    assert (result.command, result.payload, result.error) == ("ping", None, None)


@pytest.mark.asyncio
async def test_tcp_round_trip(context):
    server = CommandSocketServer(CommandDispatcher(context), ServerConfig(host="127.0.0.1", port=0))
    await server.start()
    try:
        assert server.running is True
        host, port = server.address.rsplit(":", 1)
        reader, writer = await asyncio.open_connection(host, int(port))
        writer.write(b'{"command": "ping", "payload": {"value": "hi"}}\n')
        writer.write(b"not json\n")
        writer.write(b'{"command": "nope"}\n')
        await writer.drain()
        replies = [json.loads(await reader.readline()) for _ in range(3)]
        writer.close()
        await writer.wait_closed()
    finally:
        await server.stop()
    assert replies[0] == {"success": True, "data": {"value": "hi"}, "error": None}
    assert replies[1]["success"] is False
    assert replies[2]["error"] == "Unknown command: nope"
    assert server.running is False


@pytest.mark.asyncio
async def test_unix_socket_round_trip(context, tmp_path):
    path = tmp_path / "wvb.sock"
    server = CommandSocketServer(CommandDispatcher(context), ServerConfig(socket_path=str(path)))
    await server.start()
    try:
        reader, writer = await asyncio.open_unix_connection(str(path))
        writer.write(b'{"command": "health_check"}\n')
        await writer.drain()
        reply = json.loads(await reader.readline())
        writer.close()
        await writer.wait_closed()
    finally:
        await server.stop()
    assert reply["success"] is True
    assert reply["data"]["status"] == "healthy"
    assert not path.exists()
