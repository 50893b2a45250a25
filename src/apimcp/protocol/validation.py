"""Shallow argument validation for ``tools/call``.

Each schema maps to one :class:`SchemaKind`; each kind has exactly one
validator.  Only the top-level type of every supplied value is checked:
nested shapes, array items, enums and formats are not.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from apimcp.protocol.errors import ArgumentValidationError

if TYPE_CHECKING:
    from apimcp.compiler.models import InputSchema


class SchemaKind(str, Enum):
    """Closed set of schema kinds the validator distinguishes."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    UNRESOLVED = "unresolved"

    @classmethod
    def of(cls, schema: Any) -> SchemaKind:
        """Classify *schema* by its declared ``type``; anything else is unresolved."""
        declared = schema.get("type") if isinstance(schema, Mapping) else None
        if isinstance(declared, str):
            try:
                return cls(declared)
            except ValueError:
                pass
        return cls.UNRESOLVED


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


VALIDATORS: dict[SchemaKind, Callable[[Any], bool]] = {
    SchemaKind.STRING: lambda value: isinstance(value, str),
    SchemaKind.NUMBER: _is_number,
    SchemaKind.BOOLEAN: lambda value: isinstance(value, bool),
    SchemaKind.OBJECT: lambda value: isinstance(value, Mapping),
    SchemaKind.ARRAY: lambda value: isinstance(value, list),
    SchemaKind.UNRESOLVED: lambda value: True,
}


def validate_arguments(schema: InputSchema, arguments: Mapping[str, Any]) -> None:
    """Check *arguments* against *schema*.

    Raises:
        ArgumentValidationError: On a missing required argument, an argument
            the schema does not declare, or a value of the wrong type.
    """
    for name in schema.required:
        if name not in arguments:
            raise ArgumentValidationError(f"Missing required argument: {name}", name)

    for name, value in arguments.items():
        property_schema = schema.properties.get(name)
        if property_schema is None:
            raise ArgumentValidationError(f"Unknown argument: {name}", name)

        kind = SchemaKind.of(property_schema)
        if not VALIDATORS[kind](value):
            raise ArgumentValidationError(
                f"Invalid type for {name}: expected {kind.value}",
                name,
                expected=kind.value,
                received=type(value).__name__,
            )
