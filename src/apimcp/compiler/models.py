"""Compiled tool models — the output of the schema compiler.

A :class:`ToolDefinition` binds one HTTP operation of the source description
to a JSON-Schema shaped input contract.  All models are frozen once built.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

BODY_PARAMETER = "body"
"""Name of the synthetic parameter carrying the JSON request body."""


class ParameterDescriptor(BaseModel):
    """One input of a bound operation.

    Provenance is not stored: path parameters are recognised from the path
    template, the body from :data:`BODY_PARAMETER`, everything else is query.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    name: str
    description: str | None = None
    required: bool = False
    json_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")


class BoundOperation(BaseModel):
    """The HTTP operation a tool executes."""

    model_config = {"frozen": True}

    method: str
    path: str
    parameters: tuple[ParameterDescriptor, ...] = ()

    def parameter(self, name: str) -> ParameterDescriptor | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


class InputSchema(BaseModel):
    """Object schema advertised to clients as a tool's ``inputSchema``."""

    model_config = {"frozen": True}

    type: Literal["object"] = "object"
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_subset_of_properties(self) -> InputSchema:
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            msg = f"required names not declared as properties: {', '.join(unknown)}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_parameters(cls, parameters: tuple[ParameterDescriptor, ...]) -> InputSchema:
        properties: dict[str, dict[str, Any]] = {}
        required: list[str] = []
        for param in parameters:
            properties[param.name] = param.json_schema
            if param.required:
                required.append(param.name)
        return cls(properties=properties, required=required)


class ToolDefinition(BaseModel):
    """A named, schema-described callable bound to one HTTP operation."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str
    description: str
    input_schema: InputSchema = Field(alias="inputSchema")
    operation: BoundOperation

    def to_listing(self) -> dict[str, Any]:
        """Return the shape published by ``tools/list`` (no operation binding)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.model_dump(),
        }
