"""Schema compiler — OpenAPI description to tool definitions."""

from apimcp.compiler.compiler import (
    CompileResult,
    SchemaCompiler,
    SkippedOperation,
    compile_description,
    generate_tools,
)
from apimcp.compiler.errors import CompilationError, UnresolvedReferenceError
from apimcp.compiler.models import (
    BODY_PARAMETER,
    BoundOperation,
    InputSchema,
    ParameterDescriptor,
    ToolDefinition,
)
from apimcp.compiler.naming import normalize_tool_name, unique_name

__all__ = [
    "BODY_PARAMETER",
    "BoundOperation",
    "CompilationError",
    "CompileResult",
    "InputSchema",
    "ParameterDescriptor",
    "SchemaCompiler",
    "SkippedOperation",
    "ToolDefinition",
    "UnresolvedReferenceError",
    "compile_description",
    "generate_tools",
    "normalize_tool_name",
    "unique_name",
]
