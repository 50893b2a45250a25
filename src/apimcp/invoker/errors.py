"""Error types raised while executing a tool's HTTP operation."""


class ToolExecutionError(Exception):
    """A tool invocation failed at the target API or on the way to it."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))


class MissingPathParameterError(ToolExecutionError):
    """A ``{token}`` of the path template has no matching argument."""

    def __init__(self, name: str, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(name, f"Missing required path parameter: {parameter}")


class ToolHTTPError(ToolExecutionError):
    """The target API answered with a non-success status."""

    def __init__(self, name: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(name, f"HTTP error! status: {status_code}")
