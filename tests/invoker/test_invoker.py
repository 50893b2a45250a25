"""Tests for ToolInvoker."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from apimcp.compiler.models import ToolDefinition
from apimcp.invoker.config import TargetAPIConfig
from apimcp.invoker.errors import MissingPathParameterError, ToolExecutionError, ToolHTTPError
from apimcp.invoker.invoker import ToolInvoker

BASE_URL = "https://api.example.com/v1"


def _tools(users_tools: list[ToolDefinition]) -> dict[str, ToolDefinition]:
    return {tool.name: tool for tool in users_tools}


class _Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | Callable[[], httpx.Response]) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self._response):
            return self._response()
        return self._response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _invoker(
    recorder: _Recorder, *, api_key: str | None = None, headers: dict[str, str] | None = None
) -> ToolInvoker:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    config = TargetAPIConfig(base_url=BASE_URL, api_key=api_key, headers=headers or {})
    return ToolInvoker(config, client=client)


class TestRequestBuilding:
    async def test_path_parameter_not_sent_as_query(
        self, users_tools: list[ToolDefinition]
    ) -> None:
        recorder = _Recorder(httpx.Response(200, json={"id": 7}))
        await _invoker(recorder).execute(_tools(users_tools)["get_user_by_id"], {"id": 7})

        request = recorder.last
        assert request.method == "GET"
        assert str(request.url) == "https://api.example.com/v1/users/7"

    async def test_query_parameters(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json=[]))
        await _invoker(recorder).execute(
            _tools(users_tools)["list_users"], {"limit": 10, "tag": ["a", "b"]}
        )

        params = recorder.last.url.params
        assert params["limit"] == "10"
        assert params.get_list("tag") == ["a", "b"]

    async def test_boolean_query_value(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json={}))
        await _invoker(recorder).execute(
            _tools(users_tools)["get_user_by_id"], {"id": 1, "verbose": True}
        )
        assert recorder.last.url.params["verbose"] == "true"

    async def test_json_body(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(201, json={"id": 1}))
        tool = _tools(users_tools)["create_user"]
        await _invoker(recorder).execute(tool, {"body": {"name": "Ada"}})

        request = recorder.last
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"name": "Ada"}
        assert "body" not in request.url.params

    async def test_no_body_no_content_type(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json=[]))
        await _invoker(recorder).execute(_tools(users_tools)["list_users"], {})

        request = recorder.last
        assert "content-type" not in request.headers
        assert request.content == b""

    async def test_empty_body_not_sent(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json={}))
        await _invoker(recorder).execute(_tools(users_tools)["create_user"], {"body": {}})
        assert recorder.last.content == b""

    async def test_undeclared_arguments_ignored(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json=[]))
        await _invoker(recorder).execute(_tools(users_tools)["list_users"], {"other": "x"})
        assert "other" not in recorder.last.url.params

    async def test_bearer_and_custom_headers(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json=[]))
        invoker = _invoker(recorder, api_key="secret", headers={"X-Tenant": "acme"})
        await invoker.execute(_tools(users_tools)["list_users"], {})

        headers = recorder.last.headers
        assert headers["authorization"] == "Bearer secret"
        assert headers["x-tenant"] == "acme"

    async def test_configured_headers_overridden_case_insensitively(
        self, users_tools: list[ToolDefinition]
    ) -> None:
        recorder = _Recorder(httpx.Response(201, json={}))
        invoker = _invoker(
            recorder,
            api_key="secret",
            headers={"content-type": "text/plain", "authorization": "Basic x"},
        )
        await invoker.execute(_tools(users_tools)["create_user"], {"body": {"name": "Ann"}})

        headers = recorder.last.headers
        assert headers.get_list("content-type") == ["application/json"]
        assert headers.get_list("authorization") == ["Bearer secret"]

    async def test_missing_path_parameter(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200))
        with pytest.raises(MissingPathParameterError, match="Missing required path parameter: id"):
            await _invoker(recorder).execute(_tools(users_tools)["get_user_by_id"], {})
        assert recorder.requests == []


class TestBuildUrl:
    def test_trailing_slash_stripped(self) -> None:
        invoker = ToolInvoker(TargetAPIConfig(base_url="https://api.example.com/v1/"))
        assert invoker.build_url("t", "/users", {}) == "https://api.example.com/v1/users"

    def test_path_values_percent_encoded(self) -> None:
        invoker = ToolInvoker(TargetAPIConfig(base_url=BASE_URL))
        url = invoker.build_url("t", "/files/{name}", {"name": "a b/c"})
        assert url == "https://api.example.com/v1/files/a%20b%2Fc"

    def test_repeated_token(self) -> None:
        invoker = ToolInvoker(TargetAPIConfig(base_url=BASE_URL))
        url = invoker.build_url("t", "/{id}/copy/{id}", {"id": 3})
        assert url == "https://api.example.com/v1/3/copy/3"

    def test_none_counts_as_missing(self) -> None:
        invoker = ToolInvoker(TargetAPIConfig(base_url=BASE_URL))
        with pytest.raises(MissingPathParameterError):
            invoker.build_url("t", "/users/{id}", {"id": None})

    def test_array_path_value_joined(self) -> None:
        invoker = ToolInvoker(TargetAPIConfig(base_url=BASE_URL))
        assert invoker.build_url("t", "/ids/{ids}", {"ids": [1, 2]}) == f"{BASE_URL}/ids/1%2C2"

    def test_object_query_value_sent_as_json(self, users_tools: list[ToolDefinition]) -> None:
        operation = _tools(users_tools)["list_users"].operation
        pairs = ToolInvoker.build_query(operation, {"limit": {"max": 5}})
        assert pairs == [("limit", '{"max":5}')]


class TestResponses:
    async def test_json_response_decoded(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, json={"id": 7, "name": "Ada"}))
        result = await _invoker(recorder).execute(_tools(users_tools)["get_user_by_id"], {"id": 7})
        assert result == {"id": 7, "name": "Ada"}

    async def test_vendor_json_decoded(self, users_tools: list[ToolDefinition]) -> None:
        response = httpx.Response(
            200, content=b'{"ok": true}', headers={"content-type": "application/vnd.api+json"}
        )
        result = await _invoker(_Recorder(response)).execute(_tools(users_tools)["list_users"], {})
        assert result == {"ok": True}

    async def test_text_response_returned_raw(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(200, text="hello"))
        result = await _invoker(recorder).execute(_tools(users_tools)["list_users"], {})
        assert result == "hello"

    async def test_json_looking_text_not_parsed(self, users_tools: list[ToolDefinition]) -> None:
        response = httpx.Response(200, content=b'{"a": 1}', headers={"content-type": "text/plain"})
        result = await _invoker(_Recorder(response)).execute(_tools(users_tools)["list_users"], {})
        assert result == '{"a": 1}'

    async def test_empty_json_response(self, users_tools: list[ToolDefinition]) -> None:
        response = httpx.Response(200, headers={"content-type": "application/json"})
        result = await _invoker(_Recorder(response)).execute(_tools(users_tools)["list_users"], {})
        assert result == ""

    async def test_invalid_json_response(self, users_tools: list[ToolDefinition]) -> None:
        response = httpx.Response(
            200, content=b"not json", headers={"content-type": "application/json"}
        )
        with pytest.raises(ToolExecutionError, match="Invalid JSON response"):
            await _invoker(_Recorder(response)).execute(_tools(users_tools)["list_users"], {})

    async def test_http_error_status(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(httpx.Response(404, json={"error": "not found"}))
        with pytest.raises(ToolHTTPError, match="HTTP error! status: 404") as exc_info:
            await _invoker(recorder).execute(_tools(users_tools)["get_user_by_id"], {"id": 9})
        assert exc_info.value.status_code == 404
        assert exc_info.value.name == "get_user_by_id"

    async def test_transport_error(self, users_tools: list[ToolDefinition]) -> None:
        def refuse() -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        with pytest.raises(ToolExecutionError, match="connection refused"):
            await _invoker(_Recorder(refuse)).execute(_tools(users_tools)["list_users"], {})


class TestClientLifecycle:
    async def test_short_lived_client_without_injection(
        self, users_tools: list[ToolDefinition]
    ) -> None:
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=httpx.Response(200, json={"ok": True}))
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)

        invoker = ToolInvoker(TargetAPIConfig(base_url=BASE_URL, timeout=5.0))
        with patch(
            "apimcp.invoker.invoker.httpx.AsyncClient", return_value=mock_client
        ) as client_cls:
            result = await invoker.execute(_tools(users_tools)["list_users"], {"limit": 2})

        assert result == {"ok": True}
        client_cls.assert_called_once_with(timeout=5.0)
        mock_client.__aexit__.assert_awaited_once()
        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "https://api.example.com/v1/users")
        assert kwargs["params"] == [("limit", "2")]
        assert kwargs["content"] is None

    async def test_injected_client_not_closed(self, users_tools: list[ToolDefinition]) -> None:
        recorder = _Recorder(lambda: httpx.Response(200, json=[]))
        invoker = _invoker(recorder)
        tool = _tools(users_tools)["list_users"]
        await invoker.execute(tool, {})
        await invoker.execute(tool, {})
        assert len(recorder.requests) == 2
