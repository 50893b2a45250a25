"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from opentelemetry import trace

from apimcp.compiler.models import ToolDefinition
from apimcp.protocol.registry import ToolRegistry
from apimcp.protocol.router import ProtocolRouter
from apimcp.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_RPC_METHOD,
    ATTR_SESSION_ID,
    ATTR_TOOL_NAME,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("test") as span:
            span.set_attribute("key", "value")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")


class TestRouterSpans:
    async def test_request_and_call_spans(
        self, users_tools: list[ToolDefinition], initialize_message: dict[str, Any]
    ) -> None:
        invoker = MagicMock()
        invoker.execute = AsyncMock(return_value={})
        router = ProtocolRouter(ToolRegistry(users_tools), invoker)
        await router.handle("s1", initialize_message)
        await router.handle("s1", {"jsonrpc": "2.0", "method": "notifications/initialized"})

        tracer = MagicMock()
        span = tracer.start_as_current_span.return_value.__enter__.return_value
        with patch("apimcp.protocol.router._tracer", tracer):
            await router.handle(
                "s1",
                {
                    "jsonrpc": "2.0",
                    "id": 5,
                    "method": "tools/call",
                    "params": {"name": "list_users"},
                },
            )

        names = [c.args[0] for c in tracer.start_as_current_span.call_args_list]
        assert names == ["mcp.request", "mcp.tools.call"]
        span.set_attribute.assert_any_call(ATTR_RPC_METHOD, "tools/call")
        span.set_attribute.assert_any_call(ATTR_SESSION_ID, "s1")
        span.set_attribute.assert_any_call(ATTR_TOOL_NAME, "list_users")


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        for attr in (ATTR_RPC_METHOD, ATTR_SESSION_ID, ATTR_TOOL_NAME):
            assert attr.startswith("apimcp.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "apimcp"
