"""BridgeHost — the boundary between a transport and the protocol router.

The host owns one router for one API description.  It loads and compiles
the description on first use, resolves the session id from a request
header and guarantees a well-formed JSON-RPC envelope for every request,
mapping any failure that escapes the router to a ``-32700`` server error.

Usage::

    host = BridgeHost(BridgeSettings.from_env())
    response = await host.handle(raw_body, request_headers)
    send(response.status_code, response.body())
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from apimcp.compiler.compiler import CompileResult, compile_description
from apimcp.host.loader import load_description
from apimcp.invoker.invoker import ToolInvoker
from apimcp.protocol.errors import SERVER_ERROR
from apimcp.protocol.registry import ToolRegistry
from apimcp.protocol.router import ProtocolRouter

if TYPE_CHECKING:
    import httpx

    from apimcp.host.settings import BridgeSettings
    from apimcp.protocol.sessions import SessionStore

logger = logging.getLogger(__name__)

DescriptionLoader = Callable[[str], Awaitable[dict[str, Any]]]


class HostResponse(BaseModel):
    """Status code and JSON payload to send back over the transport."""

    status_code: int = 200
    payload: dict[str, Any] | None = None

    def body(self) -> bytes:
        if self.payload is None:
            return b""
        return json.dumps(self.payload).encode()


def server_error(exc: BaseException) -> dict[str, Any]:
    """Envelope returned when a request fails outside the router."""
    return {
        "jsonrpc": "2.0",
        "id": None,
        "error": {"code": SERVER_ERROR, "message": "Server error", "data": str(exc)},
    }


class BridgeHost:
    """Serve one API description over MCP for many sessions."""

    def __init__(
        self,
        settings: BridgeSettings,
        *,
        loader: DescriptionLoader | None = None,
        client: httpx.AsyncClient | None = None,
        sessions: SessionStore | None = None,
    ) -> None:
        self._settings = settings
        self._loader = loader or self._default_loader
        self._client = client
        self._sessions = sessions
        self._router: ProtocolRouter | None = None
        self._ready = asyncio.Lock()

    @property
    def settings(self) -> BridgeSettings:
        return self._settings

    @property
    def router(self) -> ProtocolRouter | None:
        return self._router

    async def ensure_ready(self) -> ProtocolRouter:
        """Load and compile the description unless that already happened."""
        if self._router is not None:
            return self._router
        async with self._ready:
            if self._router is None:
                await self.reload()
        assert self._router is not None
        return self._router

    async def reload(self) -> CompileResult:
        """(Re)load the description and swap in the freshly compiled tools.

        Sessions negotiated earlier keep the registry snapshot and the
        invoker they were bound to; new sessions see the new tools and the
        new target API.
        """
        description = await self._loader(self._settings.spec_url)
        result = compile_description(description)
        if result.skipped:
            logger.warning("Skipped %d malformed operation(s)", len(result.skipped))
        logger.info("Compiled %d tool(s) from %s", len(result.tools), self._settings.spec_url)

        invoker = ToolInvoker(self._settings.target_config(description), client=self._client)
        if self._router is None:
            self._router = ProtocolRouter(
                ToolRegistry(result.tools), invoker, sessions=self._sessions
            )
        else:
            self._router.registry.replace(result.tools)
            self._router.set_invoker(invoker)
        return result

    def session_id(self, headers: Mapping[str, str] | None) -> str:
        wanted = self._settings.session_header.lower()
        for name, value in (headers or {}).items():
            if name.lower() == wanted and value:
                return value
        return self._settings.default_session

    async def handle(
        self, body: bytes | str, headers: Mapping[str, str] | None = None
    ) -> HostResponse:
        """Answer one transport request carrying one JSON-RPC envelope.

        Notifications produce a ``202`` with no payload.
        """
        session_id = self.session_id(headers)
        try:
            router = await self.ensure_ready()
            message = json.loads(body)
            payload = await router.handle(session_id, message)
        except Exception as exc:
            logger.exception("Request for session %s failed", session_id)
            return HostResponse(status_code=500, payload=server_error(exc))

        if payload is None:
            return HostResponse(status_code=202)
        return HostResponse(payload=payload)

    async def _default_loader(self, location: str) -> dict[str, Any]:
        return await load_description(location, client=self._client, timeout=self._settings.timeout)
