"""Line-delimited JSON command listener over TCP or a unix socket."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from loguru import logger

from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.api.rpc.envelope import Envelope
from webviewbridge.api.rpc.request_guard import prepare_command_frame
from webviewbridge.config.schema import ServerConfig

STREAM_LIMIT = 16 * 1024 * 1024


class CommandSocketServer:
    """Serves one envelope line per command line.

    Each connection runs in its own task; frames on one connection are
    dispatched in order.
    """

    def __init__(self, dispatcher: CommandDispatcher, server_config: ServerConfig):
        self.dispatcher = dispatcher
        self.server_config = server_config
        self._server: asyncio.base_events.Server | None = None
        self._clients: set[asyncio.StreamWriter] = set()

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def address(self) -> str:
        if self.server_config.socket_path:
            return f"unix:{self.server_config.socket_path}"
        if self._server is not None and self._server.sockets:
            host, port = self._server.sockets[0].getsockname()[:2]
            return f"{host}:{port}"
        return f"{self.server_config.host}:{self.server_config.port}"

    async def start(self) -> None:
        if self.server_config.socket_path:
            path = Path(self.server_config.socket_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            if path.exists():
                path.unlink()
            self._server = await asyncio.start_unix_server(self._handle_client, path=str(path), limit=STREAM_LIMIT)
            path.chmod(0o600)
        else:
            self._server = await asyncio.start_server(
                self._handle_client,
                host=self.server_config.host,
                port=self.server_config.port,
                limit=STREAM_LIMIT,
            )
        logger.info("Command socket listening on {}", self.address)

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            for writer in list(self._clients):
                writer.close()
            await self._server.wait_closed()
            self._server = None
        if self.server_config.socket_path:
            Path(self.server_config.socket_path).expanduser().unlink(missing_ok=True)
        logger.info("Command socket stopped")

    async def handle_line(self, line: bytes | str) -> Envelope:
        """Decode and dispatch one frame."""
        frame = prepare_command_frame(line)
        if frame.error is not None:
            logger.warning("Rejected frame: {}", frame.error.error)
            return frame.error
        return await self.dispatcher.dispatch(frame.command, frame.payload)

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._clients.add(writer)
        peer = writer.get_extra_info("peername") or "unix"
        logger.debug("Command client connected: {}", peer)
        try:
            while True:
                try:
                    line = await reader.readline()
                except ValueError as e:
                    envelope = Envelope.fail(f"Frame too large: {e}")
                    writer.write(json.dumps(envelope.to_dict()).encode() + b"\n")
                    await writer.drain()
                    break
                if not line:
                    break
                if not line.strip():
                    continue
                envelope = await self.handle_line(line)
                writer.write(json.dumps(envelope.to_dict(), ensure_ascii=False, default=str).encode() + b"\n")
                await writer.drain()
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug("Command client {} dropped: {}", peer, e)
        finally:
            self._clients.discard(writer)
            writer.close()
            logger.debug("Command client disconnected: {}", peer)
