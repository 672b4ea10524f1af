"""Configuration schema using Pydantic.

Single data model and defaults for the host process, persisted to
~/.webviewbridge/config.json.
"""

from typing import Literal

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """Client socket listener and webview attach endpoint."""
    host: str = "127.0.0.1"
    port: int = 9223
    socket_path: str = ""  # Unix socket path; when set, host/port are ignored
    http_host: str = "127.0.0.1"
    http_port: int = 9224  # FastAPI app serving /ws/webview and /health


class BridgeConfig(BaseModel):
    """Default correlation timeouts per command family (milliseconds)."""
    script_timeout_ms: int = 5000  # execute_js, devtools_bridge, state_dump, dom/element commands
    retrieval_timeout_ms: int = 10000  # console logs, exceptions, storage, performance
    network_timeout_ms: int = 15000  # network capture retrieval


class LoggingConfig(BaseModel):
    """Loguru sinks and dispatcher log previews."""
    level: str = "INFO"
    file_enabled: bool = True
    preview_chars: int = 1000


class ScreenshotConfig(BaseModel):
    """Defaults for native window capture."""
    quality: int = 85
    max_width: int = 1920
    max_size_mb: float = 2.0
    format: Literal["jpeg", "png"] = "jpeg"


class Config(BaseSettings):
    """Root configuration for webviewbridge."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    screenshot: ScreenshotConfig = Field(default_factory=ScreenshotConfig)

    @property
    def socket_address(self) -> str:
        """Human readable listener address."""
        if self.server.socket_path:
            return f"unix:{self.server.socket_path}"
        return f"{self.server.host}:{self.server.port}"

    model_config = ConfigDict(
        env_prefix="WEBVIEWBRIDGE_",
        env_nested_delimiter="__"
    )
