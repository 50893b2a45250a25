"""ProtocolRouter — the MCP session state machine and JSON-RPC dispatcher.

Per session id the router moves through three states:

1. **Start** — no session record.
2. **Negotiating** — ``initialize`` stored a session with ``initialized=False``.
3. **Active** — the ``initialized`` notification flipped the flag.

``initialize`` and ``ping`` are accepted in any state; ``initialized``
needs a negotiating session; every other method needs an active one.

Usage::

    router = ProtocolRouter(ToolRegistry(tools), invoker)
    response = await router.handle("session-1", {"jsonrpc": "2.0", "id": 1, ...})
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from apimcp import __version__
from apimcp.protocol.errors import (
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    SessionNotInitializedError,
    ToolCallFailedError,
)
from apimcp.protocol.models import (
    JSONRPC_VERSION,
    InitializeParams,
    JsonRpcError,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Session,
    ToolCallParams,
)
from apimcp.protocol.sessions import InMemorySessionStore, SessionStore
from apimcp.protocol.validation import validate_arguments
from apimcp.utils.telemetry import (
    ATTR_RPC_METHOD,
    ATTR_SESSION_ID,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from apimcp.compiler.models import ToolDefinition
    from apimcp.protocol.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05",)
PAGE_SIZE = 50
SERVER_NAME = "OpenAPI-MCP-Bridge"

INITIALIZED_METHODS = frozenset({"initialized", "notifications/initialized"})


class ToolExecutor(Protocol):
    """Executes the HTTP operation bound to a tool."""

    async def execute(self, tool: ToolDefinition, arguments: dict[str, Any]) -> Any: ...


class ProtocolRouter:
    """Route JSON-RPC envelopes for many sessions against one tool registry."""

    def __init__(
        self,
        registry: ToolRegistry,
        invoker: ToolExecutor | None = None,
        *,
        sessions: SessionStore | None = None,
        supported_versions: Sequence[str] = SUPPORTED_PROTOCOL_VERSIONS,
        page_size: int = PAGE_SIZE,
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
    ) -> None:
        if page_size < 1:
            msg = "page_size must be positive"
            raise ValueError(msg)
        self._registry = registry
        self._invoker = invoker
        self._sessions: SessionStore = sessions if sessions is not None else InMemorySessionStore()
        self._supported_versions = tuple(supported_versions)
        self._page_size = page_size
        self._server_info = {"name": server_name, "version": server_version}

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    def set_invoker(self, invoker: ToolExecutor) -> None:
        """Use *invoker* for sessions negotiated from now on."""
        self._invoker = invoker

    async def handle(self, session_id: str, message: Any) -> dict[str, Any] | None:
        """Process one envelope and return the response envelope.

        Notifications (no ``id``) return ``None``; failures while handling
        them are logged instead of answered.
        """
        try:
            request = self._parse(message)
        except ProtocolError as exc:
            return self._error_response(_raw_id(message), exc)

        with _tracer.start_as_current_span("mcp.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_SESSION_ID, session_id)
            logger.debug("Session %s: %s", session_id, request.method)
            try:
                result = await self._dispatch(session_id, request)
            except ProtocolError as exc:
                if isinstance(request, JsonRpcNotification):
                    logger.warning(
                        "Ignoring failed notification %s for session %s: %s",
                        request.method,
                        session_id,
                        exc.message,
                    )
                    return None
                return self._error_response(request.id, exc)

        if isinstance(request, JsonRpcNotification):
            return None
        return JsonRpcResponse(id=request.id, result=result).to_wire()

    # -- parsing ------------------------------------------------------------

    @staticmethod
    def _parse(message: Any) -> JsonRpcMessage:
        if not isinstance(message, dict):
            raise InvalidRequestError("Invalid Request")
        if message.get("jsonrpc") != JSONRPC_VERSION:
            raise InvalidRequestError("Invalid JSON-RPC version")
        if not isinstance(message.get("method"), str):
            raise InvalidRequestError("Missing method")

        model = JsonRpcRequest if "id" in message else JsonRpcNotification
        fields = {key: message[key] for key in ("jsonrpc", "method", "id") if key in message}
        params = message.get("params")
        if params is not None:
            if not isinstance(params, dict):
                raise InvalidRequestError("params must be an object")
            fields["params"] = params
        try:
            return model.model_validate(fields)
        except ValidationError as exc:
            raise InvalidRequestError("Invalid Request", str(exc)) from exc

    # -- dispatch -----------------------------------------------------------

    async def _dispatch(self, session_id: str, request: JsonRpcMessage) -> dict[str, Any]:
        method = request.method
        if method == "initialize":
            return self._initialize(session_id, request.params)
        if method == "ping":
            return {}

        session = self._sessions.get(session_id)
        if method in INITIALIZED_METHODS:
            if session is None:
                raise SessionNotInitializedError(session_id)
            self._sessions.put(session.model_copy(update={"initialized": True}))
            return {}

        if session is None or not session.initialized:
            raise SessionNotInitializedError(session_id)

        if method == "tools/list":
            return self._list_tools(session, request.params)
        if method == "tools/call":
            return await self._call_tool(session, request.params)
        raise MethodNotFoundError(method)

    def _initialize(self, session_id: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            init = InitializeParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError("Invalid initialize params", str(exc)) from exc

        if not init.protocol_version:
            raise InvalidParamsError("Missing protocol version")
        if init.protocol_version not in self._supported_versions:
            raise InvalidParamsError(
                "Unsupported protocol version",
                {
                    "supported": list(self._supported_versions),
                    "requested": init.protocol_version,
                },
            )

        self._sessions.put(
            Session(
                id=session_id,
                protocol_version=init.protocol_version,
                client_capabilities=init.capabilities,
                client_info=init.client_info,
                tools=self._registry.snapshot,
                invoker=self._invoker,
            )
        )
        logger.info(
            "Session %s negotiated protocol %s", session_id, init.protocol_version
        )
        return {
            "protocolVersion": init.protocol_version,
            "capabilities": {"tools": {"listChanged": True}},
            "serverInfo": dict(self._server_info),
        }

    def _list_tools(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        offset = self._parse_cursor(params.get("cursor"))
        page = session.tools.page(offset, self._page_size)

        result: dict[str, Any] = {"tools": [tool.to_listing() for tool in page]}
        # A full page always advertises a cursor, even if the next page is empty.
        if len(page) == self._page_size:
            result["nextCursor"] = str(offset + self._page_size)
        return result

    @staticmethod
    def _parse_cursor(cursor: Any) -> int:
        if cursor is None or cursor == "":
            return 0
        if not isinstance(cursor, str) or not cursor.isascii() or not cursor.isdigit():
            raise InvalidParamsError("Invalid cursor", {"cursor": cursor})
        return int(cursor)

    async def _call_tool(self, session: Session, params: dict[str, Any]) -> dict[str, Any]:
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as exc:
            raise InvalidParamsError("Invalid tool call params", str(exc)) from exc

        if not call.name:
            raise InvalidParamsError("Missing tool name")
        tool = session.tools.get(call.name)
        if tool is None:
            raise InvalidParamsError("Tool not found", {"name": call.name})

        validate_arguments(tool.input_schema, call.arguments)

        invoker: ToolExecutor | None = session.invoker or self._invoker
        if invoker is None:
            raise ToolCallFailedError(tool.name, RuntimeError("Tool executor not initialized"))

        with _tracer.start_as_current_span("mcp.tools.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            try:
                result = await invoker.execute(tool, call.arguments)
            except Exception as exc:
                logger.error("Error executing tool %s: %s", tool.name, exc)
                raise ToolCallFailedError(tool.name, exc) from exc

        return {
            "content": [{"type": "text", "text": json.dumps(result, default=str)}],
            "isError": False,
        }

    @staticmethod
    def _error_response(request_id: int | str | None, exc: ProtocolError) -> dict[str, Any]:
        error = JsonRpcError(code=exc.code, message=exc.message, data=exc.data)
        return JsonRpcResponse(id=request_id, error=error).to_wire()


def _raw_id(message: Any) -> int | str | None:
    if isinstance(message, dict):
        request_id = message.get("id")
        if isinstance(request_id, int | str) and not isinstance(request_id, bool):
            return request_id
    return None
