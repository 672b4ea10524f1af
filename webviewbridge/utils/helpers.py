"""Small shared helpers."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, returning it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the webviewbridge data directory (~/.webviewbridge)."""
    return ensure_dir(Path.home() / ".webviewbridge")


def now_ms() -> int:
    return int(time.time() * 1000)


def preview_text(value: Any, limit: int = 1000) -> str:
    """Render ``value`` as JSON text capped at ``limit`` characters for logging."""
    try:
        text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... (truncated, total length: {len(text)} chars)"
