"""FastAPI host: webview attach websocket, HTTP health, and the command socket lifecycle."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import Body, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from loguru import logger

from webviewbridge import __version__
from webviewbridge.api.dispatcher import CommandDispatcher
from webviewbridge.api.rpc.context_models import CommandContext
from webviewbridge.api.rpc.error_boundary import classify_http_status, error_body
from webviewbridge.api.rpc.ws_webview import (
    bootstrap_webview_ws_connection,
    cleanup_webview_ws_connection,
    run_webview_ws_loop,
)
from webviewbridge.api.socket_server import CommandSocketServer
from webviewbridge.config.access import get_config
from webviewbridge.config.schema import Config
from webviewbridge.utils.exceptions import BridgeError, classify_exception, sanitize_error_message


def create_app(
    *,
    config: Config | None = None,
    context: CommandContext | None = None,
    start_socket: bool = True,
) -> FastAPI:
    """Create the host application.

    The command socket is started and stopped with the app lifespan unless
    ``start_socket`` is False.
    """
    config = config or (context.config if context is not None else get_config())
    context = context or CommandContext.create(config=config)
    dispatcher = CommandDispatcher(context)
    socket_server = CommandSocketServer(dispatcher, config.server)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting webviewbridge host {}", __version__)
        if start_socket:
            await socket_server.start()
        try:
            yield
        finally:
            if start_socket:
                await socket_server.stop()
            for handle in list(context.registry.list_attached()):
                await context.registry.unregister(handle.label, handle=handle, reason="host shutdown")
            logger.info("webviewbridge host stopped")

    app = FastAPI(
        title="webviewbridge",
        description="Command bridge into attached webviews",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context
    app.state.dispatcher = dispatcher
    app.state.socket_server = socket_server

    @app.exception_handler(BridgeError)
    async def bridge_exception_handler(request: Request, exc: BridgeError):
        return JSONResponse(status_code=classify_http_status(exc), content=error_body(exc))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        code, _, _ = classify_exception(exc)
        logger.exception("Unhandled exception [{}]: {}", code, sanitize_error_message(str(exc)))
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "INTERNAL_ERROR", "message": "An unexpected error occurred", "code": code},
        )

    @app.get("/health")
    async def health():
        """Liveness and attached webviews."""
        return {
            "ok": True,
            "service": "webviewbridge",
            "version": __version__,
            "socket": socket_server.address,
            "socket_running": socket_server.running,
            "webviews": [handle.describe() for handle in context.registry.list_attached()],
            "pending_correlations": context.bridge.pending_count(),
        }

    @app.post("/commands/{command}")
    async def run_command(command: str, payload: Any = Body(default=None)):
        """Dispatch one command over HTTP; same envelope as the socket."""
        envelope = await dispatcher.dispatch(command, payload)
        return envelope.to_dict()

    @app.websocket("/ws/webview")
    async def websocket_webview(websocket: WebSocket):
        """Attach endpoint for webviews; carries tasks out and replies back."""
        handle = await bootstrap_webview_ws_connection(
            websocket=websocket,
            registry=context.registry,
            bridge=context.bridge,
            logger_info=logger.info,
        )
        if handle is None:
            return
        try:
            await run_webview_ws_loop(
                websocket=websocket,
                handle=handle,
                bridge=context.bridge,
                logger_debug=logger.debug,
            )
        except WebSocketDisconnect:
            await cleanup_webview_ws_connection(handle=handle, registry=context.registry, reason="disconnected")
        except Exception as e:
            await cleanup_webview_ws_connection(
                handle=handle,
                registry=context.registry,
                reason="error",
                logger_error=logger.error,
                exc=e,
            )

    return app


def run_server(config: Config, *, log_level: str = "warning") -> None:
    """Run the host until interrupted."""
    app = create_app(config=config)
    uvicorn.run(
        app,
        host=config.server.http_host,
        port=config.server.http_port,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=10,
        log_level=log_level,
    )
