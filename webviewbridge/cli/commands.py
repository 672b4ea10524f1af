"""CLI commands for webviewbridge.

``serve`` runs the host (webview attach endpoint plus command socket);
``send``, ``health`` and ``status`` talk to a running host.
"""

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from webviewbridge import __logo__, __version__
from webviewbridge.cli.shared.logging_utils import ensure_rotating_log_file
from webviewbridge.cli.shared.network_utils import is_port_in_use

app = typer.Typer(
    name="webviewbridge",
    help=f"{__logo__} webviewbridge - command bridge into attached webviews",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} webviewbridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """webviewbridge - command bridge into attached webviews."""
    pass


def _load(config_path: Path | None):
    from webviewbridge.config.access import get_config

    try:
        return get_config(config_path=config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config with defaults"),
):
    """Write a default config file."""
    from webviewbridge.config.loader import get_config_path, save_config
    from webviewbridge.config.schema import Config

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)
    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Wrote default config to {config_path}")


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Command socket host"),
    port: int = typer.Option(None, "--port", "-p", help="Command socket port"),
    socket_path: str = typer.Option(None, "--socket-path", help="Serve the command socket on a unix path instead of TCP"),
    http_port: int = typer.Option(None, "--http-port", help="Port for /ws/webview and /health"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
):
    """Start the host: webview attach endpoint, HTTP health and command socket."""
    from loguru import logger

    from webviewbridge.api.server import run_server

    config = _load(config_path).model_copy(deep=True)
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if socket_path:
        config.server.socket_path = socket_path
    if http_port:
        config.server.http_port = http_port

    level = "DEBUG" if verbose else config.logging.level
    logger.remove()
    logger.add(sys.stderr, level=level)
    if config.logging.file_enabled:
        log_path = ensure_rotating_log_file("serve", level=level)
        console.print(f"[dim]Logging to {log_path}[/dim]")

    if not config.server.socket_path and is_port_in_use(config.server.host, config.server.port):
        console.print(
            f"[red]Port {config.server.port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] or [cyan]--socket-path[/cyan] to pick another address."
        )
        raise typer.Exit(1)
    if is_port_in_use(config.server.http_host, config.server.http_port):
        console.print(f"[red]HTTP port {config.server.http_port} is already in use.[/red] Use [cyan]--http-port[/cyan].")
        raise typer.Exit(1)

    console.print(f"{__logo__} Starting webviewbridge v{__version__}")
    console.print(f"  Commands: {config.socket_address}")
    console.print(f"  Webviews: ws://{config.server.http_host}:{config.server.http_port}/ws/webview")
    run_server(config, log_level="debug" if verbose else "warning")


@app.command()
def send(
    command: str = typer.Argument(..., help="Command name, e.g. execute_js or get-console-logs"),
    payload: str = typer.Argument(None, help="JSON payload, e.g. '{\"code\": \"1+1\"}'"),
    timeout: float = typer.Option(30.0, "--timeout", "-t", help="Seconds to wait for the reply"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Send one command to a running host and print the envelope."""
    from webviewbridge.cli.shared.network_utils import send_command

    config = _load(config_path)
    body = None
    if payload:
        try:
            body = json.loads(payload)
        except json.JSONDecodeError as e:
            console.print(f"[red]Payload is not valid JSON: {e}[/red]")
            raise typer.Exit(2)
    try:
        envelope = send_command(config.server, command, body, timeout=timeout)
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print_json(json.dumps(envelope, ensure_ascii=False, default=str))
    if not envelope.get("success"):
        raise typer.Exit(1)


@app.command()
def health(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Query /health on a running host."""
    from webviewbridge.cli.shared.http_utils import get_host_base_url, http_json

    config = _load(config_path)
    url = f"{get_host_base_url(config)}/health"
    try:
        data = http_json("GET", url)
    except RuntimeError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {data.get('service')} at {url}")
    webviews = data.get("webviews") or []
    if not webviews:
        console.print("[dim]No webviews attached[/dim]")
        return
    table = Table(title="Attached webviews")
    table.add_column("Label", style="cyan")
    table.add_column("Title")
    table.add_column("URL")
    for wv in webviews:
        table.add_row(str(wv.get("label", "")), str(wv.get("title", "")), str(wv.get("url", "")))
    console.print(table)
    console.print(f"Pending correlations: {data.get('pending_correlations', 0)}")


@app.command()
def status():
    """Show webviewbridge configuration and whether a host is reachable."""
    from webviewbridge.cli.shared.http_utils import get_host_base_url, http_json
    from webviewbridge.config.loader import get_config_path

    config_path = get_config_path()
    config = _load(None)
    console.print(f"{__logo__} webviewbridge Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[dim](defaults)[/dim]'}")
    console.print(f"Command socket: {config.socket_address}")
    console.print(f"HTTP: {get_host_base_url(config)}")
    console.print(
        f"Timeouts: script {config.bridge.script_timeout_ms}ms, "
        f"retrieval {config.bridge.retrieval_timeout_ms}ms, network {config.bridge.network_timeout_ms}ms"
    )
    try:
        data = http_json("GET", f"{get_host_base_url(config)}/health", timeout=2.0)
        console.print(f"Host: [green]✓ running[/green] ({len(data.get('webviews') or [])} webviews attached)")
    except RuntimeError:
        console.print("Host: [dim]not running[/dim]")


if __name__ == "__main__":
    app()
