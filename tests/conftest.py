"""Shared fixtures: a small OpenAPI description and the tools compiled from it."""

from __future__ import annotations

from typing import Any

import pytest

from apimcp.compiler.compiler import generate_tools
from apimcp.compiler.models import ToolDefinition


def _users_description() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Users", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com/v1"}],
        "paths": {
            "/users": {
                "get": {
                    "operationId": "listUsers",
                    "summary": "List users",
                    "parameters": [
                        {"name": "limit", "in": "query", "schema": {"type": "number"}},
                        {"name": "tag", "in": "query", "schema": {"type": "array"}},
                    ],
                },
                "post": {
                    "operationId": "createUser",
                    "description": "Create a user",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/User"}
                            }
                        },
                    },
                },
            },
            "/users/{id}": {
                "get": {
                    "operationId": "getUserById",
                    "parameters": [
                        {
                            "name": "id",
                            "in": "path",
                            "required": True,
                            "schema": {"type": "integer"},
                        },
                        {"$ref": "#/components/parameters/Verbose"},
                    ],
                },
            },
        },
        "components": {
            "schemas": {
                "User": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": ["name"],
                }
            },
            "parameters": {
                "Verbose": {"name": "verbose", "in": "query", "schema": {"type": "boolean"}}
            },
        },
    }


@pytest.fixture
def users_description() -> dict[str, Any]:
    return _users_description()


@pytest.fixture
def users_tools(users_description: dict[str, Any]) -> list[ToolDefinition]:
    return generate_tools(users_description)


@pytest.fixture
def initialize_message() -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "initialize",
        "params": {
            "protocolVersion": "2024-11-05",
            "capabilities": {"roots": {}},
            "clientInfo": {"name": "test-client", "version": "0.0.1"},
        },
    }
