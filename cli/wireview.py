"""
WireView CLI application.

This module provides the command-line interface for inspecting MCP servers,
built using Typer. It includes commands for managing the saved server URL
and custom headers, sending one-off requests, and an interactive shell that
keeps one MCP session alive across commands.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wireview import __version__
from wireview.client import SessionClient
from wireview.commands import Commands
from wireview.settings import SettingsError, SettingsStore
from wireview.viewer import ResponseViewer

# Create the Typer app
app = typer.Typer(
    name="wireview",
    help="Inspect Model Context Protocol (MCP) servers over JSON-RPC/HTTP",
    add_completion=False,
)

# Create the console for rich output
console = Console()

# Create command groups
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")

SHELL_HELP = """\
Commands:
  initialize                 Send the initialize request
  tools                      List tools
  prompts                    List prompts
  resources                  List resources
  call NAME [ARGS_JSON]      Call a tool
  request METHOD [PARAMS]    Send any method
  send JSON                  Send a raw JSON-RPC request
  uninitialize               Forget the negotiated session
  url URL                    Set the server URL
  headers [JSON]             Set (or clear) custom headers
  status                     Show the session status
  help                       Show this help
  quit                       Leave the shell"""


# Configure logging
def setup_logging(level: str = "WARNING") -> None:
    """
    Set up logging with the specified level.

    structlog output is routed through the standard library so that both
    end up in the same rich handler.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def create_commands(config: Optional[Path] = None) -> Commands:
    """
    Create the commands for a settings file, with the client connected.

    Args:
        config: Path to the settings file (default location when omitted)

    Returns:
        Commands ready to use
    """
    store = SettingsStore(config)
    commands = Commands(SessionClient(), store, ResponseViewer(console))
    commands.load_settings()
    return commands


# Version command
@app.callback(invoke_without_command=True)
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
):
    """
    Inspect Model Context Protocol (MCP) servers over JSON-RPC/HTTP.
    """
    # Set up logging
    setup_logging("DEBUG" if debug else "WARNING")

    # Show version and exit if requested
    if version:
        console.print(f"[bold]WireView[/] version [bold blue]{__version__}[/]")
        raise typer.Exit()


# Configuration commands
@config_app.command("set-url")
def config_set_url(
    url: str = typer.Argument(..., help="MCP server URL, e.g. http://localhost:3000/mcp"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Save the MCP server URL.
    """
    try:
        message = create_commands(config).set_server_url(url)
        console.print(f"[green]{message}[/]")

    except SettingsError as e:
        console.print(f"[bold red]Error saving server URL: {e.message}[/]")
        raise typer.Exit(1)


@config_app.command("set-headers")
def config_set_headers(
    headers: str = typer.Argument(
        "",
        help='Custom headers as a JSON object, e.g. \'{"Authorization": "Bearer token"}\'; empty clears them',
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Save the custom HTTP headers sent with every request.
    """
    try:
        message = create_commands(config).set_custom_headers(headers)
        console.print(f"[green]{message}[/]")

    except SettingsError as e:
        console.print(f"[bold red]Error saving custom headers: {e.message}[/]")
        raise typer.Exit(1)


@config_app.command("show")
def config_show(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Show the saved settings.
    """
    try:
        store = SettingsStore(config)
        settings = store.settings

    except SettingsError as e:
        console.print(f"[bold red]Error loading settings: {e.message}[/]")
        raise typer.Exit(1)

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("File", str(store.path))
    table.add_row("Server URL", settings.server_url or "Not set")
    if settings.custom_headers:
        for name, value in settings.custom_headers.items():
            table.add_row(f"Header {name}", value)
    else:
        table.add_row("Custom headers", "None")

    console.print(table)


# Request commands
@app.command("request")
def request(
    method: str = typer.Argument(..., help="Method to call, e.g. tools/list"),
    params: Optional[str] = typer.Option(
        None,
        "--params",
        "-p",
        help="Method parameters as a JSON string",
    ),
    initialize: bool = typer.Option(
        True,
        "--initialize/--no-initialize",
        help="Perform the initialize handshake first",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Send one request, optionally after the initialize handshake.
    """
    try:
        commands = create_commands(config)
    except SettingsError as e:
        console.print(f"[bold red]Error loading settings: {e.message}[/]")
        raise typer.Exit(1)

    async def run() -> bool:
        async with commands.client:
            if initialize and method != "initialize":
                exchange = await commands.initialize()
                if exchange.is_error:
                    return False
            exchange = await commands.request(method, params)
            return not exchange.is_error

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command("send")
def send(
    json_text: str = typer.Argument(
        ..., help='Raw JSON-RPC request, e.g. \'{"method": "tools/list", "params": {}}\''
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Send a raw JSON-RPC request without a handshake.
    """
    try:
        commands = create_commands(config)
    except SettingsError as e:
        console.print(f"[bold red]Error loading settings: {e.message}[/]")
        raise typer.Exit(1)

    async def run() -> bool:
        async with commands.client:
            exchange = await commands.send_custom_request(json_text)
            return not exchange.is_error

    if not asyncio.run(run()):
        raise typer.Exit(1)


async def dispatch(commands: Commands, line: str) -> bool:
    """
    Run one shell command line.

    Args:
        commands: Commands to run against
        line: Line typed by the user

    Returns:
        False when the shell should exit, True otherwise
    """
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return True

    name = parts[0].lower()
    rest = parts[1] if len(parts) > 1 else ""

    if name in ("quit", "exit"):
        return False

    if name == "help":
        console.print(SHELL_HELP)
    elif name == "status":
        commands.viewer.show_status(commands.status())
    elif name == "initialize":
        await commands.initialize()
    elif name == "tools":
        await commands.list_tools()
    elif name == "prompts":
        await commands.list_prompts()
    elif name == "resources":
        await commands.list_resources()
    elif name == "call":
        if not rest:
            console.print("[bold red]Usage: call NAME [ARGS_JSON][/]")
            return True
        args = rest.split(maxsplit=1)
        await commands.call_tool(args[0], args[1] if len(args) > 1 else None)
    elif name == "request":
        if not rest:
            console.print("[bold red]Usage: request METHOD [PARAMS_JSON][/]")
            return True
        args = rest.split(maxsplit=1)
        await commands.request(args[0], args[1] if len(args) > 1 else None)
    elif name == "send":
        if not rest:
            console.print("[bold red]Usage: send JSON[/]")
            return True
        await commands.send_custom_request(rest)
    elif name == "uninitialize":
        console.print(f"[green]{commands.uninitialize()}[/]")
    elif name == "url":
        try:
            console.print(f"[green]{commands.set_server_url(rest)}[/]")
        except SettingsError as e:
            console.print(f"[bold red]{e.message}[/]")
    elif name == "headers":
        try:
            console.print(f"[green]{commands.set_custom_headers(rest)}[/]")
        except SettingsError as e:
            console.print(f"[bold red]{e.message}[/]")
    else:
        console.print(f"[bold red]Unknown command: {name}[/] (type 'help')")

    return True


@app.command("shell")
def shell(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Start an interactive shell keeping one MCP session alive.
    """
    try:
        commands = create_commands(config)
    except SettingsError as e:
        console.print(f"[bold red]Error loading settings: {e.message}[/]")
        raise typer.Exit(1)

    async def run() -> None:
        async with commands.client:
            commands.viewer.show_status(commands.status())
            console.print("Type 'help' for commands.")

            while True:
                try:
                    line = await asyncio.to_thread(console.input, "[bold blue]wireview>[/] ")
                except (EOFError, KeyboardInterrupt):
                    break

                if not await dispatch(commands, line):
                    break

    asyncio.run(run())


if __name__ == "__main__":
    app()
