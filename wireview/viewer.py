"""
Terminal presentation of MCP exchanges.

An ``Exchange`` is the plain record of one command: what was sent, what came
back (or the error text) and every event streamed on the way. The
``ResponseViewer`` renders exchanges with rich: JSON trees for the request
and response, an event list for streamed answers and summary tables for the
list methods.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from wireview.protocol import (
    CallToolResult,
    InitializeResult,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    MCPMethod,
)


class Exchange(BaseModel):
    """Everything one command sent and received."""

    title: str = Field(..., description="Title shown above the exchange")
    request: Optional[Any] = Field(None, description="Request as it was sent")
    response: Optional[Any] = Field(
        None, description="Final response, or the error text when is_error is set"
    )
    events: List[Dict[str, Any]] = Field(
        default_factory=list, description="Streamed messages as {index, data}, from 1"
    )
    is_error: bool = Field(False, description="Whether the command failed")

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def method(self) -> Optional[str]:
        """Method of the sent request, if known."""
        if isinstance(self.request, dict):
            return self.request.get("method")
        return None


class Status(BaseModel):
    """Status line describing the session state."""

    text: str
    tooltip: str
    warning: bool = False


def _scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def build_json_tree(data: Any, label: str = "root", tree: Optional[Tree] = None) -> Tree:
    """
    Build a rich tree for a JSON value.

    Args:
        data: Decoded JSON value
        label: Label of the root node
        tree: Existing node to attach to (a new tree is created when omitted)

    Returns:
        The tree node holding ``data``
    """
    if tree is None:
        tree = Tree(f"[bold]{label}[/]")

    if isinstance(data, dict):
        items = data.items()
    elif isinstance(data, list):
        items = ((f"[{i}]", value) for i, value in enumerate(data))
    else:
        tree.add(_scalar(data))
        return tree

    for key, value in items:
        if isinstance(value, dict) and value:
            build_json_tree(value, tree=tree.add(f"[cyan]{key}[/] {{}} {len(value)} keys"))
        elif isinstance(value, list) and value:
            build_json_tree(value, tree=tree.add(f"[cyan]{key}[/] [] {len(value)} items"))
        else:
            tree.add(f"[cyan]{key}[/]: [green]{_scalar(value)}[/]")

    return tree


class ResponseViewer:
    """Renders exchanges to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show(self, exchange: Exchange) -> None:
        """
        Render an exchange.

        Errors are shown as plain text. A response that arrived as several
        streamed events is followed by the event list.

        Args:
            exchange: Exchange to render
        """
        self.console.rule(f"[bold]{exchange.title}[/]", style="red" if exchange.is_error else "blue")

        if exchange.request is not None:
            self.console.print(build_json_tree(exchange.request, label="Request"))

        if exchange.is_error:
            self.console.print(Panel(str(exchange.response), title="Error", border_style="red"))
            return

        self.console.print(build_json_tree(exchange.response, label="Response"))

        summary = self.summarize(exchange)
        if summary is not None:
            self.console.print(summary)

        if exchange.event_count > 1:
            self.show_events(exchange.events)

    def show_events(self, events: List[Dict[str, Any]]) -> None:
        """Render the list of streamed events."""
        self.console.print(f"[bold]Events[/] ({len(events)})")
        for event in events:
            self.console.print(build_json_tree(event["data"], label=f"Event {event['index']}"))

    def show_status(self, status: Status) -> None:
        """Render the session status line."""
        style = "yellow" if status.warning else "green"
        self.console.print(f"[bold {style}]{status.text}[/]")
        self.console.print(status.tooltip)

    def summarize(self, exchange: Exchange) -> Optional[Any]:
        """
        Build a summary table for well-known results.

        Args:
            exchange: Successful exchange

        Returns:
            A renderable, or None when the result has no summary or does not
            match the expected shape
        """
        response = exchange.response
        if not isinstance(response, dict) or not isinstance(response.get("result"), dict):
            return None

        result = response["result"]
        method = exchange.method

        try:
            if method == MCPMethod.INITIALIZE:
                return self._initialize_table(InitializeResult.model_validate(result))
            if method == MCPMethod.TOOLS_LIST:
                return self._tools_table(ListToolsResult.model_validate(result))
            if method == MCPMethod.PROMPTS_LIST:
                return self._prompts_table(ListPromptsResult.model_validate(result))
            if method == MCPMethod.RESOURCES_LIST:
                return self._resources_table(ListResourcesResult.model_validate(result))
            if method == MCPMethod.TOOLS_CALL:
                return self._tool_call_content(CallToolResult.model_validate(result))
        except ValidationError:
            return None

        return None

    def _initialize_table(self, result: InitializeResult) -> Table:
        table = Table(title="Server Information")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        if result.server_info:
            table.add_row("Name", result.server_info.name)
            table.add_row("Version", result.server_info.version)
        table.add_row("Protocol Version", result.protocol_version)
        table.add_row("Capabilities", ", ".join(result.capabilities) or "None")
        return table

    def _tools_table(self, result: ListToolsResult) -> Table:
        table = Table(title="Available Tools")
        table.add_column("Name", style="cyan")
        table.add_column("Description", style="green")
        table.add_column("Parameters", style="yellow")

        for tool in result.tools:
            table.add_row(tool.name, tool.description or "", ", ".join(tool.parameter_names))
        return table

    def _prompts_table(self, result: ListPromptsResult) -> Table:
        table = Table(title="Available Prompts")
        table.add_column("Name", style="cyan")
        table.add_column("Description", style="green")
        table.add_column("Arguments", style="yellow")

        for prompt in result.prompts:
            arguments = ", ".join(
                f"{arg.name}{'*' if arg.required else ''}" for arg in prompt.arguments or []
            )
            table.add_row(prompt.name, prompt.description or "", arguments)
        return table

    def _resources_table(self, result: ListResourcesResult) -> Table:
        table = Table(title="Available Resources")
        table.add_column("URI", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("MIME Type", style="yellow")

        for resource in result.resources:
            table.add_row(resource.uri, resource.name, resource.mime_type or "")
        return table

    def _tool_call_content(self, result: CallToolResult) -> Panel:
        texts = [item.get("text", "") for item in result.content if item.get("type") == "text"]
        style = "red" if result.is_error else "green"
        return Panel(Group(*texts) if texts else "(no text content)", title="Tool Output", border_style=style)
