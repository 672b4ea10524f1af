"""HTTP helpers for CLI commands."""

from __future__ import annotations

import json
from typing import Any
from urllib import error, request

from webviewbridge.config.schema import Config


def get_host_base_url(config: Config) -> str:
    """Build the HTTP base URL of a running host from config."""
    host = config.server.http_host
    if host in {"0.0.0.0", "::"}:
        host = "127.0.0.1"
    return f"http://{host}:{config.server.http_port}"


def http_json(
    method: str,
    url: str,
    payload: Any = None,
    timeout: float = 5.0,
) -> dict[str, Any]:
    """Send an HTTP request and parse JSON response."""
    body = None
    headers: dict[str, str] = {"Accept": "application/json"}
    if payload is not None:
        body = json.dumps(payload).encode("utf-8")
        headers["Content-Type"] = "application/json"
    req = request.Request(url=url, data=body, method=method.upper(), headers=headers)
    try:
        with request.urlopen(req, timeout=timeout) as response:
            text = response.read().decode("utf-8", errors="replace")
            return json.loads(text) if text else {}
    except error.HTTPError as exc:
        text = exc.read().decode("utf-8", errors="replace")
        detail: Any = text
        try:
            detail = json.loads(text)
        except json.JSONDecodeError:
            pass
        raise RuntimeError(f"{exc.code} {exc.reason}: {detail}") from exc
    except error.URLError as exc:
        raise RuntimeError(f"Host unavailable: {exc.reason}") from exc
