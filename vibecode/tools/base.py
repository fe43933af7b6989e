"""Base types and definitions for tools."""

import types
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel

ToolHandler = Callable[[Any], Awaitable[str]]
ParameterType = Literal["string", "number", "boolean"]

_PARAMETER_TYPES: dict[type, ParameterType] = {
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
}


class ToolError(Exception):
    """A tool could not do what was asked; the message is shown to the model."""


@dataclass(frozen=True)
class ToolParameter:
    """Declared type of a single tool parameter."""

    type: ParameterType
    optional: bool = False
    description: str | None = None


def _parameter_type(annotation: Any) -> ParameterType:
    candidates = [annotation]
    if get_origin(annotation) in (Union, types.UnionType):
        candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
    for candidate in candidates:
        if candidate in _PARAMETER_TYPES:
            return _PARAMETER_TYPES[candidate]
    raise TypeError(f"Unsupported tool parameter type: {annotation!r}")


@dataclass
class ToolDefinition:
    """Definition of a tool available to the model."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler

    @property
    def parameters(self) -> dict[str, ToolParameter]:
        """Parameter name to declared type, in field order."""
        return {
            name: ToolParameter(
                type=_parameter_type(field.annotation),
                optional=not field.is_required(),
                description=field.description,
            )
            for name, field in self.input_schema_class.model_fields.items()
        }

    def get_json_schema(self) -> dict[str, Any]:
        """Get the chat-completions function schema for this tool.

        Optional parameters are left out of ``required``; numbers are declared
        as integers.
        """
        properties: dict[str, Any] = {}
        required: list[str] = []

        for name, parameter in self.parameters.items():
            prop: dict[str, Any] = {"type": "integer" if parameter.type == "number" else parameter.type}
            if parameter.description:
                prop["description"] = parameter.description
            properties[name] = prop
            if not parameter.optional:
                required.append(name)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {"type": "object", "properties": properties, "required": required},
            },
        }

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)
