"""
User-level commands for WireView.

``Commands`` wires a ``SessionClient`` to the settings store and the viewer.
Every protocol command returns an ``Exchange``; failures never escape a
command, they come back as error exchanges.
"""

import json
from typing import Any, Dict, List, Optional, Union

import structlog

from wireview import __version__
from wireview.client import SessionClient
from wireview.protocol import (
    CallToolParams,
    ClientInfo,
    InitializeParams,
    MalformedInputError,
    MCPMethod,
    Params,
    Request,
    Response,
)
from wireview.settings import Settings, SettingsError, SettingsStore, parse_headers_text
from wireview.viewer import Exchange, ResponseViewer, Status


class Commands:
    """Commands exposed to the user interface."""

    def __init__(
        self,
        client: SessionClient,
        store: SettingsStore,
        viewer: Optional[ResponseViewer] = None,
    ) -> None:
        """
        Initialize the commands.

        The client follows the settings store: it is reconnected whenever
        the settings change.

        Args:
            client: Session client to drive
            store: Settings store holding the server URL and custom headers
            viewer: Optional viewer every exchange is shown on
        """
        self.client = client
        self.store = store
        self.viewer = viewer
        self.logger = structlog.get_logger("wireview.commands")
        self._unsubscribe = store.subscribe(self.load_settings)

    def close(self) -> None:
        """Stop following the settings store."""
        self._unsubscribe()

    # ---- Settings ----

    def load_settings(self, settings: Optional[Settings] = None) -> None:
        """
        Apply settings to the client.

        Args:
            settings: Settings to apply (the store's current settings by default)
        """
        settings = settings or self.store.settings

        if settings.server_url:
            self.client.connect(settings.server_url)
            self.logger.info("Loaded server URL from settings", server_url=settings.server_url)
        elif self.client.is_connected:
            self.client.disconnect()
            self.logger.info("Server URL cleared from settings")

        # Always applied, so that removed headers are cleared
        self.client.set_custom_headers(settings.custom_headers)
        if settings.custom_headers:
            self.logger.info("Loaded custom headers from settings", headers=settings.custom_headers)
        else:
            self.logger.info("Custom headers cleared from settings")

    def set_server_url(self, url: str) -> str:
        """
        Save a new server URL and connect to it.

        Raises:
            SettingsError: If the URL is invalid or cannot be saved
        """
        if not url or not url.strip():
            raise SettingsError("Server URL must not be empty")

        self.store.update(server_url=url)
        return f"MCP server URL set: {url}"

    def set_custom_headers(self, headers_text: str) -> str:
        """
        Save new custom headers typed as a JSON object.

        Raises:
            SettingsError: If the text is not a JSON object of strings
        """
        headers = parse_headers_text(headers_text)
        self.store.update(custom_headers=headers)

        if headers:
            return f"Custom headers set: {json.dumps(headers)}"
        return "Custom headers cleared"

    def status(self) -> Status:
        """Describe the session state."""
        if not self.client.is_connected:
            return Status(
                text="MCP: URL Not Set",
                tooltip="Set the MCP server URL to get started",
                warning=True,
            )

        if not self.client.is_initialized:
            return Status(
                text="MCP: Uninitialized",
                tooltip=(
                    f"Server: {self.client.server_url}\n"
                    "Status: Not initialized\n"
                    "Run \"initialize\" to initialize"
                ),
                warning=True,
            )

        return Status(
            text="MCP: Initialized",
            tooltip=f"Server: {self.client.server_url}\nStatus: Ready",
        )

    # ---- Session ----

    def uninitialize(self) -> str:
        self.client.uninitialize()
        self.logger.info("Session uninitialized")
        return "MCP session uninitialized"

    async def initialize(self) -> Exchange:
        params = InitializeParams(client_info=ClientInfo(version=__version__))
        return await self._run(
            "Initialize Response", "Initialize", MCPMethod.INITIALIZE, params.to_params()
        )

    # ---- Protocol methods ----

    async def list_tools(self) -> Exchange:
        return await self._run("Tools List Response", "List Tools", MCPMethod.TOOLS_LIST)

    async def list_prompts(self) -> Exchange:
        return await self._run("Prompts List Response", "List Prompts", MCPMethod.PROMPTS_LIST)

    async def list_resources(self) -> Exchange:
        return await self._run(
            "Resources List Response", "List Resources", MCPMethod.RESOURCES_LIST
        )

    async def call_tool(self, name: str, arguments_json: Optional[str] = None) -> Exchange:
        """
        Call a tool.

        Args:
            name: Name of the tool
            arguments_json: Tool arguments as a JSON object (optional)

        Returns:
            The exchange
        """
        try:
            arguments = json.loads(arguments_json) if arguments_json else {}
        except json.JSONDecodeError as e:
            return self._error("Call Tool", MalformedInputError(f"Invalid JSON: {str(e)}"))

        if not isinstance(arguments, dict):
            return self._error(
                "Call Tool", MalformedInputError("Invalid JSON: tool arguments must be a JSON object")
            )

        params = CallToolParams(name=name, arguments=arguments)
        return await self._run(
            f"Call Tool: {name}", "Call Tool", MCPMethod.TOOLS_CALL, params.to_params()
        )

    async def send_custom_request(self, json_text: str) -> Exchange:
        """
        Send a hand-written JSON-RPC request.

        Args:
            json_text: Raw JSON-RPC request text

        Returns:
            The exchange
        """
        try:
            request = json.loads(json_text)
        except json.JSONDecodeError:
            request = None

        try:
            response = await self.client.send_custom_request(json_text)
        except Exception as e:
            return self._error("Custom Request", e, request)

        return self._show(Exchange(title="Custom Request", request=request, response=response.to_dict()))

    async def request(self, method: str, params_json: Optional[str] = None) -> Exchange:
        """
        Send any method with optional JSON parameters.

        Args:
            method: Method name
            params_json: Parameters as JSON text (optional)

        Returns:
            The exchange
        """
        try:
            params = json.loads(params_json) if params_json else None
        except json.JSONDecodeError as e:
            return self._error(method, MalformedInputError(f"Invalid JSON: {str(e)}"))

        if params is not None and not isinstance(params, (dict, list)):
            return self._error(
                method, MalformedInputError("Invalid JSON: params must be an object or an array")
            )

        return await self._run(f"{method} Response", method, method, params)

    # ---- Internals ----

    async def _run(
        self,
        title: str,
        error_title: str,
        method: Union[str, MCPMethod],
        params: Optional[Params] = None,
    ) -> Exchange:
        sent: Dict[str, Any] = {}
        events: List[Dict[str, Any]] = []

        def on_before_send(request: Request) -> None:
            sent["request"] = request.to_dict()

        def on_event(event: Response) -> None:
            events.append({"index": len(events) + 1, "data": event.to_dict()})

        method_name = method.value if isinstance(method, MCPMethod) else method
        self.logger.debug("Sending request", method=method_name)

        try:
            response = await self.client.send_request(
                method,
                params,
                on_event=on_event,
                on_before_send=on_before_send,
            )
        except Exception as e:
            return self._error(error_title, e, sent.get("request"))

        self.logger.info(
            "Received response",
            method=method_name,
            events=len(events),
            error=response.has_error,
        )

        return self._show(
            Exchange(
                title=title,
                request=sent.get("request"),
                response=response.to_dict(),
                events=events,
            )
        )

    def _error(self, title: str, error: Exception, request: Optional[Any] = None) -> Exchange:
        self.logger.error(f"{title} failed", error=str(error))
        return self._show(
            Exchange(
                title=f"{title} - ERROR",
                request=request,
                response=str(error),
                is_error=True,
            )
        )

    def _show(self, exchange: Exchange) -> Exchange:
        if self.viewer is not None:
            self.viewer.show(exchange)
        return exchange
