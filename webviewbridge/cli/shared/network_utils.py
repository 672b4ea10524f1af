"""Network helpers for CLI commands."""

from __future__ import annotations

import errno
import json
import socket
from typing import Any

from webviewbridge.config.schema import ServerConfig


def is_port_in_use(host: str, port: int) -> bool:
    """Return True if the port is already bound (e.g. by another process)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise


def _connect(server: ServerConfig, timeout: float) -> socket.socket:
    if server.socket_path:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        sock.connect(server.socket_path)
        return sock
    host = "127.0.0.1" if server.host in {"0.0.0.0", "::"} else server.host
    return socket.create_connection((host, server.port), timeout=timeout)


def send_command(server: ServerConfig, command: str, payload: Any = None, timeout: float = 30.0) -> dict[str, Any]:
    """Send one command frame to the command socket and return the envelope."""
    line = json.dumps({"command": command, "payload": payload}, ensure_ascii=False).encode("utf-8") + b"\n"
    try:
        with _connect(server, timeout) as sock:
            sock.sendall(line)
            with sock.makefile("rb") as reader:
                reply = reader.readline()
    except OSError as exc:
        raise RuntimeError(f"Command socket unavailable: {exc}") from exc
    if not reply:
        raise RuntimeError("Command socket closed without a reply")
    return json.loads(reply)
