"""
MCP session client over JSON-RPC/HTTP.

This module provides the client that posts JSON-RPC requests and
notifications to an MCP server with httpx, reads either a single JSON body
or a Server-Sent Events stream back, and carries the session values
(protocol version, session id, pinned request id) negotiated by the
initialize handshake.
"""

import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional, Union

import httpx

from wireview.protocol import (
    MCPMethod,
    Notification,
    Params,
    Request,
    RequestId,
    Response,
    generate_request_id,
    parse_custom_request,
    parse_response,
)
from wireview.transport import (
    ACCEPT_HEADER_VALUE,
    CONTENT_TYPE_JSON,
    PROTOCOL_VERSION_HEADER,
    SESSION_ID_HEADER,
    EmptyStreamError,
    SSEStreamDecoder,
    TransportError,
    is_event_stream,
)
from wireview.client.session import Session

Method = Union[str, MCPMethod]
EventCallback = Callable[[Response], None]
BeforeSendCallback = Callable[[Request], None]


class ClientError(Exception):
    """Exception raised for client-related errors."""

    def __init__(self, message: str, data: Optional[Any] = None):
        """
        Initialize a client error.

        Args:
            message: Error message
            data: Optional error data
        """
        self.message = message
        self.data = data
        super().__init__(message)


class NotConnectedError(ClientError):
    """Exception raised when a call is made before a server URL is set."""

    def __init__(self, message: str = "Not connected to any server. Please connect first."):
        super().__init__(message)


class SendError(ClientError):
    """Exception raised when sending fails for a reason other than the HTTP status."""


def _method_name(method: Method) -> str:
    return method.value if isinstance(method, MCPMethod) else method


def _run_callback(callback: Callable[[Any], None], value: Any) -> None:
    try:
        callback(value)
    except Exception as e:
        raise SendError(f"Failed to send request: {str(e)}") from e


class SessionClient:
    """
    Client for one MCP session over HTTP.

    The client never contacts the server until a request or notification is
    sent. Only one request may be in flight at a time: the session state is
    not protected against concurrent use.

    Every request after a successful ``initialize`` reuses the initialize
    request's ID until ``uninitialize`` is called.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the session client.

        Args:
            session: Session state to operate on (a fresh one by default)
            http_client: HTTP client to use; one without timeouts is created
                on first use when omitted
        """
        self.session = session or Session()
        self._http = http_client
        self._owns_http = http_client is None
        self._logger = logging.getLogger("wireview.client.http")

    # ---- Session state ----

    @property
    def is_connected(self) -> bool:
        """Check if a server URL is configured."""
        return self.session.is_connected

    @property
    def is_initialized(self) -> bool:
        """Check if the initialize handshake has completed."""
        return self.session.is_initialized

    @property
    def server_url(self) -> Optional[str]:
        return self.session.server_url

    @property
    def protocol_version(self) -> Optional[str]:
        return self.session.protocol_version

    @property
    def session_id(self) -> Optional[str]:
        return self.session.session_id

    @property
    def custom_headers(self) -> Dict[str, str]:
        """Get a copy of the custom headers."""
        return dict(self.session.custom_headers)

    def connect(self, url: str) -> None:
        """
        Set the server URL.

        The server is not contacted. Negotiated protocol state is kept, so
        pointing an initialized client at another server carries the old
        session values along.

        Args:
            url: MCP endpoint URL
        """
        self.session.server_url = url

    def set_custom_headers(self, headers: Dict[str, str]) -> None:
        """
        Replace the custom headers.

        Args:
            headers: New header set; an empty mapping clears all custom headers
        """
        self.session.custom_headers = dict(headers)

    def uninitialize(self) -> None:
        """Forget the handshake state, keeping the server URL and headers."""
        self.session.clear_initialization()

    def disconnect(self) -> None:
        """Forget the server URL and the handshake state."""
        self.session.clear()

    # ---- Sending ----

    async def send_notification(self, method: Method, params: Optional[Params] = None) -> None:
        """
        Send a notification and wait for the HTTP exchange to complete.

        The response body is not read on success.

        Args:
            method: Notification method
            params: Optional notification parameters

        Raises:
            NotConnectedError: If no server URL is set
            TransportError: If the server answers with a non-success status
            SendError: If the notification could not be sent
        """
        url = self._require_url()
        method = _method_name(method)
        notification = Notification(method=method, params=params)

        headers = self._base_headers()
        if self.session.protocol_version and method != MCPMethod.INITIALIZED:
            headers[PROTOCOL_VERSION_HEADER] = self.session.protocol_version
        if self.session.session_id:
            headers[SESSION_ID_HEADER] = self.session.session_id

        self._logger.debug(f"Sending notification {method} to {url}")

        try:
            async with self._client().stream(
                "POST",
                url,
                content=json.dumps(notification.to_dict()),
                headers=headers,
            ) as response:
                await self._raise_for_status(response)

        except TransportError:
            raise

        except Exception as e:
            raise SendError(f"Failed to send notification: {str(e)}") from e

    def build_request(
        self,
        method: Method,
        params: Optional[Params] = None,
        request_id: Optional[RequestId] = None,
    ) -> Request:
        """
        Build the request to send for a method, assigning its ID.

        An ``initialize`` request gets ``request_id`` or a fresh ID, and that
        ID is pinned to the session. Any other request reuses the pinned ID
        when there is one, and otherwise gets ``request_id`` or a fresh ID.

        Args:
            method: Method name
            params: Optional method parameters
            request_id: Optional explicit request ID

        Returns:
            The request, ready to pass to ``stream_request``
        """
        method = _method_name(method)

        if method == MCPMethod.INITIALIZE:
            id_ = request_id if request_id is not None else generate_request_id()
            self.session.initialize_request_id = id_
        elif self.session.initialize_request_id is not None:
            id_ = self.session.initialize_request_id
        else:
            id_ = request_id if request_id is not None else generate_request_id()

        return Request(id=id_, method=method, params=params)

    async def stream_request(self, request: Request) -> AsyncIterator[Response]:
        """
        Send a request and yield every message the server answers with.

        A JSON body yields one message; an event stream yields one message
        per parsed event, in arrival order. The last message yielded is the
        final response. For ``initialize``, the session values are captured
        and ``notifications/initialized`` is sent once the iterator has been
        exhausted, so consumers must drain it.

        Args:
            request: Request built with ``build_request``

        Yields:
            Response messages in the order they were received

        Raises:
            NotConnectedError: If no server URL is set
            TransportError: If the server answers with a non-success status
            EmptyStreamError: If an event stream carried no parseable message
            SendError: If the request failed for any other reason
        """
        url = self._require_url()
        is_initialize = request.method == MCPMethod.INITIALIZE

        headers = self._base_headers()
        if not is_initialize:
            self._add_session_headers(headers)

        self._logger.debug(f"Sending request {request.method} (id={request.id}) to {url}")

        final: Optional[Response] = None
        session_id: Optional[str] = None

        try:
            async with self._client().stream(
                "POST",
                url,
                content=json.dumps(request.to_dict()),
                headers=headers,
            ) as response:
                await self._raise_for_status(response)

                async for message in self._read_messages(response):
                    final = message
                    yield message

                session_id = response.headers.get(SESSION_ID_HEADER)

        except (TransportError, EmptyStreamError):
            raise

        except Exception as e:
            raise SendError(f"Failed to send request: {str(e)}") from e

        if is_initialize and final is not None and final.is_success:
            self._complete_initialize(final, session_id)
            await self.send_notification(MCPMethod.INITIALIZED)

    async def send_request(
        self,
        method: Method,
        params: Optional[Params] = None,
        on_event: Optional[EventCallback] = None,
        request_id: Optional[RequestId] = None,
        on_before_send: Optional[BeforeSendCallback] = None,
    ) -> Response:
        """
        Send a request and return the final response.

        Args:
            method: Method name
            params: Optional method parameters
            on_event: Called with every received message, including the
                single message of a plain JSON response
            request_id: Optional explicit request ID (see ``build_request``)
            on_before_send: Called with the request right before it is sent

        Returns:
            The last message received, whether it carries a result or an error

        Raises:
            NotConnectedError: If no server URL is set
            TransportError: If the server answers with a non-success status
            EmptyStreamError: If an event stream carried no parseable message
            SendError: If the request failed for any other reason, or a
                callback raised
        """
        self._require_url()
        request = self.build_request(method, params, request_id)

        if on_before_send:
            _run_callback(on_before_send, request)

        final: Optional[Response] = None
        messages = self.stream_request(request)
        try:
            async for message in messages:
                final = message
                if on_event:
                    _run_callback(on_event, message)
        finally:
            # Releases the HTTP response when iteration stops early
            await messages.aclose()

        return final

    async def send_custom_request(self, json_text: str) -> Response:
        """
        Send a hand-written JSON-RPC request.

        Missing ``jsonrpc`` and ``id`` members are filled in. The negotiated
        protocol version and session id are always attached when known. The
        answer is read as a single JSON body; event streams are not decoded.

        Args:
            json_text: Raw JSON-RPC request text

        Returns:
            The server's response

        Raises:
            NotConnectedError: If no server URL is set
            MalformedInputError: If the text is not a valid JSON object
            TransportError: If the server answers with a non-success status
            SendError: If the request failed for any other reason
        """
        url = self._require_url()
        request = parse_custom_request(json_text)

        headers = self._base_headers()
        self._add_session_headers(headers)

        self._logger.debug(f"Sending custom request {request.get('method')} to {url}")

        try:
            async with self._client().stream(
                "POST",
                url,
                content=json.dumps(request),
                headers=headers,
            ) as response:
                await self._raise_for_status(response)
                await response.aread()
                return parse_response(response.content)

        except TransportError:
            raise

        except Exception as e:
            raise SendError(f"Failed to send request: {str(e)}") from e

    # ---- Internals ----

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=None)
        return self._http

    def _require_url(self) -> str:
        if not self.session.is_connected:
            raise NotConnectedError()
        return self.session.server_url

    def _base_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": CONTENT_TYPE_JSON,
            "Accept": ACCEPT_HEADER_VALUE,
        }
        headers.update(self.session.custom_headers)
        return headers

    def _add_session_headers(self, headers: Dict[str, str]) -> None:
        if self.session.protocol_version:
            headers[PROTOCOL_VERSION_HEADER] = self.session.protocol_version
        if self.session.session_id:
            headers[SESSION_ID_HEADER] = self.session.session_id

    async def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        body = ""
        try:
            await response.aread()
            body = response.text
        except Exception as e:
            # The status is what matters; the body is only extra detail
            self._logger.debug(f"Could not read error response body: {str(e)}")

        raise TransportError(response.status_code, response.reason_phrase, body)

    async def _read_messages(self, response: httpx.Response) -> AsyncIterator[Response]:
        if is_event_stream(response.headers.get("content-type")):
            async for message in SSEStreamDecoder().decode(response.aiter_text()):
                yield message
            return

        await response.aread()
        yield parse_response(response.content)

    def _complete_initialize(self, response: Response, session_id: Optional[str]) -> None:
        result = response.result
        if isinstance(result, dict) and result.get("protocolVersion"):
            self.session.protocol_version = result["protocolVersion"]

        # A session id is only kept on an initialized session
        if session_id and self.session.protocol_version:
            self.session.session_id = session_id

        self._logger.info(
            f"Session initialized (protocol={self.session.protocol_version}, "
            f"session={self.session.session_id})"
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
