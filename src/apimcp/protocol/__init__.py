"""MCP protocol layer — JSON-RPC routing, sessions and argument validation."""

from apimcp.protocol.errors import (
    ArgumentValidationError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    SessionNotInitializedError,
    ToolCallFailedError,
)
from apimcp.protocol.models import (
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Session,
)
from apimcp.protocol.registry import RegistrySnapshot, ToolRegistry
from apimcp.protocol.router import PAGE_SIZE, SUPPORTED_PROTOCOL_VERSIONS, ProtocolRouter
from apimcp.protocol.sessions import InMemorySessionStore, SessionStore
from apimcp.protocol.validation import SchemaKind, validate_arguments

__all__ = [
    "PAGE_SIZE",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "ArgumentValidationError",
    "InMemorySessionStore",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MethodNotFoundError",
    "ProtocolError",
    "ProtocolRouter",
    "RegistrySnapshot",
    "SchemaKind",
    "Session",
    "SessionNotInitializedError",
    "SessionStore",
    "ToolCallFailedError",
    "ToolRegistry",
    "validate_arguments",
]
