"""Tool invoker — executes compiled tools against the target HTTP API."""

from apimcp.invoker.config import TargetAPIConfig
from apimcp.invoker.errors import MissingPathParameterError, ToolExecutionError, ToolHTTPError
from apimcp.invoker.invoker import ToolInvoker

__all__ = [
    "MissingPathParameterError",
    "TargetAPIConfig",
    "ToolExecutionError",
    "ToolHTTPError",
    "ToolInvoker",
]
