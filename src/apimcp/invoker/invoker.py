"""ToolInvoker — executes a tool's bound HTTP operation with httpx.

Arguments are routed by structure: names appearing as ``{token}`` in the
path template fill the path, the synthetic ``body`` argument becomes the JSON
payload, and every other declared argument goes to the query string.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from apimcp.compiler.compiler import PATH_TOKEN
from apimcp.compiler.models import BODY_PARAMETER
from apimcp.invoker.errors import MissingPathParameterError, ToolExecutionError, ToolHTTPError
from apimcp.utils.telemetry import (
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS,
    ATTR_HTTP_URL,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from apimcp.compiler.models import BoundOperation, ToolDefinition
    from apimcp.invoker.config import TargetAPIConfig

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Characters encodeURIComponent leaves alone besides the unreserved set.
_PATH_SAFE = "!*'()"


class ToolInvoker:
    """Build and send one HTTP request per tool call.

    An injected :class:`httpx.AsyncClient` is reused (its owner manages
    pooling); otherwise a short-lived client is opened per call.

    Usage::

        invoker = ToolInvoker(TargetAPIConfig(base_url="https://api.example.com"))
        user = await invoker.execute(tool, {"id": 7})
    """

    def __init__(self, config: TargetAPIConfig, *, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def config(self) -> TargetAPIConfig:
        return self._config

    async def execute(self, tool: ToolDefinition, arguments: dict[str, Any]) -> Any:
        """Execute *tool* and return the decoded JSON or raw text response.

        Raises:
            MissingPathParameterError: A path token has no argument.
            ToolHTTPError: The API answered with a non-success status.
            ToolExecutionError: The request could not be completed.
        """
        operation = tool.operation
        url = self.build_url(tool.name, operation.path, arguments)
        query = self.build_query(operation, arguments)
        body = self.prepare_body(operation, arguments)
        headers = self.prepare_headers(has_body=body is not None)

        with _tracer.start_as_current_span("apimcp.http.request") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            span.set_attribute(ATTR_HTTP_METHOD, operation.method)
            span.set_attribute(ATTR_HTTP_URL, url)
            try:
                response = await self._send(operation.method, url, query, headers, body)
            except httpx.HTTPError as exc:
                logger.error("Error executing tool %s: %s", tool.name, exc)
                raise ToolExecutionError(tool.name, str(exc) or type(exc).__name__) from exc
            span.set_attribute(ATTR_HTTP_STATUS, response.status_code)

        if not response.is_success:
            logger.error("Tool %s got HTTP status %s", tool.name, response.status_code)
            raise ToolHTTPError(tool.name, response.status_code)
        return self._decode(tool.name, response)

    # -- request building ---------------------------------------------------

    def build_url(self, tool_name: str, path: str, arguments: dict[str, Any]) -> str:
        """Join the base URL and *path*, substituting every ``{token}``."""

        def substitute(match: re.Match[str]) -> str:
            token = match.group(1)
            value = arguments.get(token)
            if value is None:
                raise MissingPathParameterError(tool_name, token)
            return quote(_plain_string(value), safe=_PATH_SAFE)

        return self._config.base_url.rstrip("/") + PATH_TOKEN.sub(substitute, path)

    @staticmethod
    def build_query(operation: BoundOperation, arguments: dict[str, Any]) -> list[tuple[str, str]]:
        """Collect query pairs for declared, non-path, non-body arguments.

        Arrays repeat the key once per item; objects are sent as JSON text.
        """
        path_tokens = set(PATH_TOKEN.findall(operation.path))
        pairs: list[tuple[str, str]] = []
        for param in operation.parameters:
            if param.name == BODY_PARAMETER or param.name in path_tokens:
                continue
            value = arguments.get(param.name)
            if value is None:
                continue
            if isinstance(value, list):
                pairs.extend((param.name, _plain_string(item)) for item in value)
            else:
                pairs.append((param.name, _plain_string(value)))
        return pairs

    @staticmethod
    def prepare_body(operation: BoundOperation, arguments: dict[str, Any]) -> Any:
        if operation.parameter(BODY_PARAMETER) is not None and arguments.get(BODY_PARAMETER):
            return arguments[BODY_PARAMETER]
        return None

    def prepare_headers(self, *, has_body: bool) -> httpx.Headers:
        # Header names are case-insensitive; assignment replaces any configured spelling.
        headers = httpx.Headers(self._config.headers)
        if has_body:
            headers["Content-Type"] = "application/json"
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    # -- transport ----------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        query: list[tuple[str, str]],
        headers: httpx.Headers,
        body: Any,
    ) -> httpx.Response:
        content = json.dumps(body).encode() if body is not None else None
        if self._client is not None:
            return await self._client.request(
                method, url, params=query, headers=headers, content=content
            )
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            return await client.request(method, url, params=query, headers=headers, content=content)

    @staticmethod
    def _decode(tool_name: str, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()
        if response.content and (media_type == "application/json" or media_type.endswith("+json")):
            try:
                return response.json()
            except ValueError as exc:
                raise ToolExecutionError(tool_name, f"Invalid JSON response: {exc}") from exc
        return response.text


def _plain_string(value: Any) -> str:
    """Render *value* the way it should appear in a URL."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(_plain_string(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)
