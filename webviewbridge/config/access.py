"""Process-wide cached access to the loaded configuration."""

from __future__ import annotations

import threading
from pathlib import Path

from webviewbridge.config.loader import get_config_path, load_config
from webviewbridge.config.schema import Config

_lock = threading.RLock()
_cached: tuple[Path, Config] | None = None


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Return the cached config, loading it when missing, stale or for another path."""
    global _cached
    path = _resolve(config_path)
    with _lock:
        if force_reload or _cached is None or _cached[0] != path:
            _cached = (path, load_config(path))
        return _cached[1]


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Drop the cached config (only if it belongs to ``config_path`` when given)."""
    global _cached
    with _lock:
        if config_path is None or (_cached is not None and _cached[0] == _resolve(config_path)):
            _cached = None
