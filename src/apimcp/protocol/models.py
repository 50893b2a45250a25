"""MCP models — JSON-RPC 2.0 envelopes, method params and session state."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from apimcp.protocol.registry import RegistrySnapshot  # noqa: TC001

JSONRPC_VERSION = "2.0"

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request; always answered with a response."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    id: int | str | None = None
    params: dict[str, Any] = Field(default_factory=dict)


class JsonRpcNotification(BaseModel):
    """A JSON-RPC 2.0 notification: no ``id``, never answered."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result`` / ``error`` present."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result if self.result is not None else {}
        return payload


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class InitializeParams(BaseModel):
    """Params of the ``initialize`` request."""

    model_config = {"populate_by_name": True}

    protocol_version: str | None = Field(default=None, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: dict[str, Any] = Field(default_factory=dict, alias="clientInfo")


class ToolCallParams(BaseModel):
    """Params of the ``tools/call`` request."""

    name: str | None = None
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _null_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class Session(BaseModel):
    """Per-client negotiation state.

    Created by ``initialize`` with ``initialized=False``; the ``initialized``
    notification flips it to active.  ``tools`` is the registry snapshot
    bound at negotiation time and ``invoker`` the executor configured for
    that snapshot, so a reload never sends old tools to a new target API.
    """

    model_config = {"arbitrary_types_allowed": True}

    id: str
    initialized: bool = False
    protocol_version: str
    client_capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: dict[str, Any] = Field(default_factory=dict)
    tools: RegistrySnapshot
    invoker: Any = None
