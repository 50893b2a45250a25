"""SchemaCompiler — turns an OpenAPI description into tool definitions.

Pure logic, no I/O.  Every ``(path, method)`` pair becomes one
:class:`ToolDefinition`; operations that cannot be compiled are logged and
reported as :class:`SkippedOperation` entries instead of aborting the run.

Typical usage::

    tools = generate_tools(description)

    result = compile_description(description)
    for skipped in result.skipped:
        print(skipped.method, skipped.path, skipped.reason)
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from apimcp.compiler.errors import CompilationError, UnresolvedReferenceError
from apimcp.compiler.models import (
    BODY_PARAMETER,
    BoundOperation,
    InputSchema,
    ParameterDescriptor,
    ToolDefinition,
)
from apimcp.compiler.naming import candidate_name, unique_name
from apimcp.compiler.refs import RefResolver, is_reference

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})
JSON_MEDIA_TYPE = "application/json"

PATH_TOKEN = re.compile(r"{([^}]+)}")


class SkippedOperation(BaseModel):
    """An operation excluded from the registry because it was malformed."""

    method: str
    path: str
    reason: str


class CompileResult(BaseModel):
    """Tools compiled from one description, plus the operations left out."""

    tools: list[ToolDefinition] = Field(default_factory=list)
    skipped: list[SkippedOperation] = Field(default_factory=list)


def compile_description(description: dict[str, Any]) -> CompileResult:
    """Compile *description* and report skipped operations alongside the tools."""
    return SchemaCompiler(description).compile()


def generate_tools(description: dict[str, Any]) -> list[ToolDefinition]:
    """Compile *description* into an ordered list of uniquely named tools."""
    return compile_description(description).tools


class SchemaCompiler:
    """Compile the ``paths`` section of one API description."""

    def __init__(self, description: dict[str, Any]) -> None:
        self._description = description if isinstance(description, dict) else {}
        self._resolver = RefResolver(self._description)

    def compile(self) -> CompileResult:
        result = CompileResult()
        taken: set[str] = set()

        paths = self._description.get("paths")
        if not isinstance(paths, dict):
            return result

        for path, path_item in paths.items():
            if not isinstance(path, str) or not path_item:
                continue
            try:
                path_item = self._resolver.resolve(path_item)
            except UnresolvedReferenceError as exc:
                logger.warning("Skipping path %s: %s", path, exc)
                continue
            if not isinstance(path_item, dict):
                continue

            shared = path_item.get("parameters")
            for method, operation in path_item.items():
                if not isinstance(method, str) or method.lower() not in HTTP_METHODS:
                    continue
                if operation is None:
                    continue
                try:
                    tool = self._compile_operation(method.lower(), path, operation, shared, taken)
                except CompilationError as exc:
                    logger.warning("Failed to create tool for %s %s: %s", method.upper(), path, exc)
                    result.skipped.append(
                        SkippedOperation(method=method.upper(), path=path, reason=exc.detail)
                    )
                    continue
                taken.add(tool.name)
                result.tools.append(tool)

        return result

    def _compile_operation(
        self,
        method: str,
        path: str,
        operation: Any,
        shared_parameters: Any,
        taken: set[str],
    ) -> ToolDefinition:
        if not isinstance(operation, dict):
            raise CompilationError(method, path, "operation is not an object")

        operation_id = operation.get("operationId")
        if operation_id is not None and not isinstance(operation_id, str):
            raise CompilationError(method, path, "operationId is not a string")

        name = unique_name(candidate_name(method, path, operation_id), taken)
        try:
            parameters = self._collect_parameters(method, path, operation, shared_parameters)
            return ToolDefinition(
                name=name,
                description=self._describe(method, path, operation),
                input_schema=InputSchema.from_parameters(parameters),
                operation=BoundOperation(method=method.upper(), path=path, parameters=parameters),
            )
        except ValidationError as exc:
            raise CompilationError(method, path, str(exc)) from exc

    @staticmethod
    def _describe(method: str, path: str, operation: dict[str, Any]) -> str:
        for key in ("description", "summary"):
            text = operation.get(key)
            if isinstance(text, str) and text:
                return text
        return f"{method.upper()} {path}"

    def _collect_parameters(
        self,
        method: str,
        path: str,
        operation: dict[str, Any],
        shared_parameters: Any,
    ) -> tuple[ParameterDescriptor, ...]:
        # Keyed by name: a later declaration replaces an earlier one in place.
        collected: dict[str, ParameterDescriptor] = {}

        for token in PATH_TOKEN.findall(path):
            collected[token] = ParameterDescriptor(
                name=token,
                description=f"Path parameter: {token}",
                required=True,
                schema={"type": "string"},
            )

        for declared in (shared_parameters, operation.get("parameters")):
            if declared is None:
                continue
            if not isinstance(declared, list):
                raise CompilationError(method, path, "parameters is not a list")
            for raw in declared:
                param = self._parameter(method, path, raw)
                if param is not None:
                    collected[param.name] = param

        body = self._request_body(method, path, operation.get("requestBody"))
        if body is not None:
            collected[BODY_PARAMETER] = body

        return tuple(collected.values())

    def _parameter(self, method: str, path: str, raw: Any) -> ParameterDescriptor | None:
        if is_reference(raw):
            try:
                raw = self._resolver.resolve(raw)
            except UnresolvedReferenceError as exc:
                logger.warning("Dropping parameter of %s %s: %s", method.upper(), path, exc)
                return None
        if not isinstance(raw, dict):
            raise CompilationError(method, path, "parameter is not an object")

        name = raw.get("name")
        if not isinstance(name, str) or not name:
            raise CompilationError(method, path, "parameter has no name")

        description = raw.get("description")
        return ParameterDescriptor(
            name=name,
            description=description if isinstance(description, str) else None,
            required=bool(raw.get("required", False)),
            schema=self._parameter_schema(method, path, raw),
        )

    def _parameter_schema(self, method: str, path: str, raw: dict[str, Any]) -> dict[str, Any]:
        schema = raw.get("schema")
        if schema is None:
            # Parameters may describe themselves through a single-entry content map.
            content = raw.get("content")
            if isinstance(content, dict) and content:
                media = next(iter(content.values()))
                if isinstance(media, dict):
                    schema = media.get("schema")
        if schema is None:
            return {"type": "string"}
        return self._schema(method, path, schema)

    def _request_body(self, method: str, path: str, raw: Any) -> ParameterDescriptor | None:
        if raw is None:
            return None
        try:
            raw = self._resolver.resolve(raw)
        except UnresolvedReferenceError as exc:
            logger.warning("Dropping request body of %s %s: %s", method.upper(), path, exc)
            return None
        if not isinstance(raw, dict):
            raise CompilationError(method, path, "requestBody is not an object")

        content = raw.get("content")
        if not isinstance(content, dict):
            return None
        media = content.get(JSON_MEDIA_TYPE)
        if not isinstance(media, dict) or not media.get("schema"):
            return None

        description = raw.get("description")
        return ParameterDescriptor(
            name=BODY_PARAMETER,
            description=description if isinstance(description, str) else "Request body",
            required=bool(raw.get("required", False)),
            schema=self._schema(method, path, media["schema"]),
        )

    def _schema(self, method: str, path: str, schema: Any) -> dict[str, Any]:
        inlined = self._resolver.inline_schema(schema)
        if not isinstance(inlined, dict):
            raise CompilationError(method, path, "schema is not an object")
        return inlined
