"""JSON-RPC error codes and the exceptions that carry them.

Every :class:`ProtocolError` maps to exactly one JSON-RPC error code; the
router converts raised errors into error envelopes and never lets them
escape.
"""

from __future__ import annotations

from typing import Any

INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
TOOL_EXECUTION_FAILED = -32603
SESSION_NOT_INITIALIZED = -32001
SERVER_ERROR = -32700


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""

    code: int = TOOL_EXECUTION_FAILED

    def __init__(self, message: str, data: Any = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)


class InvalidRequestError(ProtocolError):
    """The envelope is not a JSON-RPC 2.0 message."""

    code = INVALID_REQUEST


class MethodNotFoundError(ProtocolError):
    """The method is not one the server implements."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        super().__init__("Method not found", {"method": method})


class InvalidParamsError(ProtocolError):
    """Request parameters are missing or invalid."""

    code = INVALID_PARAMS


class ArgumentValidationError(InvalidParamsError):
    """A ``tools/call`` argument set does not satisfy the tool's input schema."""

    def __init__(self, message: str, argument: str, **details: Any) -> None:
        self.argument = argument
        super().__init__(message, {"argument": argument, **details})


class SessionNotInitializedError(ProtocolError):
    """The method requires an active session that does not exist."""

    code = SESSION_NOT_INITIALIZED

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not initialized", {"sessionId": session_id})


class ToolCallFailedError(ProtocolError):
    """Invoking the bound HTTP operation failed."""

    code = TOOL_EXECUTION_FAILED

    def __init__(self, tool_name: str, cause: Exception) -> None:
        self.tool_name = tool_name
        self.cause = cause
        data: dict[str, Any] = {"tool": tool_name, "message": str(cause)}
        status_code = getattr(cause, "status_code", None)
        if status_code is not None:
            data["status"] = status_code
        super().__init__("Tool execution failed", data)
