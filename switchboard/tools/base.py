"""switchboard/tools/base.py

Tool contract and OpenAI function-schema construction.

A tool owns two layers: ``extract_arguments`` turns a free-text ``task``
into structured fields (a best-effort heuristic), and ``_run`` does the work
on structured fields. ``execute`` glues them together and never raises.
"""

from __future__ import annotations

# Standard Library
import abc
import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_NUMBER_TYPES = frozenset({"int", "integer", "float", "double", "number"})
_BOOLEAN_TYPES = frozenset({"bool", "boolean"})
_ARRAY_TYPES = frozenset({"array", "list", "sequence", "tuple"})


@dataclasses.dataclass(frozen=True, slots=True)
class ToolParameter:
    """One entry of a tool's parameter table.

    Attributes:
        type: Semantic type name (``string``, ``integer``, ``float``,
            ``boolean``, ``array`` ...); mapped to JSON Schema on export.
        description: Human-readable description shown to the model.
        required: Whether the parameter is listed under ``required``.
        items: Item schema for array parameters.
        enum: Allowed values, if the parameter is an enumeration.
    """

    type: str
    description: str
    required: bool = False
    items: Mapping[str, Any] | None = None
    enum: tuple[str, ...] | None = None


def json_schema_type(type_name: str) -> str:
    """Map a semantic type name to its JSON Schema type."""
    lowered = type_name.lower()
    if lowered in _NUMBER_TYPES:
        return "number"
    if lowered in _BOOLEAN_TYPES:
        return "boolean"
    if lowered in _ARRAY_TYPES:
        return "array"
    return "string"


def build_function_schema(
    name: str,
    description: str,
    parameters: Mapping[str, ToolParameter],
) -> dict[str, Any]:
    """Build an OpenAI function definition from a parameter table.

    Args:
        name: Function name exposed to the model.
        description: Function description exposed to the model.
        parameters: Ordered parameter table.

    Returns:
        A ``{"type": "function", "function": {...}}`` tool definition.
    """
    properties: dict[str, Any] = {}
    required: list[str] = []
    for param_name, param in parameters.items():
        schema_type = json_schema_type(param.type)
        prop: dict[str, Any] = {"type": schema_type, "description": param.description}
        if schema_type == "array" and param.items is not None:
            prop["items"] = dict(param.items)
        if param.enum:
            prop["enum"] = list(param.enum)
        properties[param_name] = prop
        if param.required:
            required.append(param_name)

    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


class Tool(abc.ABC):
    """A named, described, schema-bearing unit of capability.

    Subclasses set ``name``, ``description`` and ``parameters`` and
    implement ``_run``.
    """

    name: str = ""
    description: str = ""
    parameters: Mapping[str, ToolParameter] = {}

    def schema(self) -> dict[str, Any]:
        """Return the tool's OpenAI function definition."""
        return build_function_schema(self.name, self.description, self.parameters)

    def definition(self) -> str:
        """Return a plain-text description block for system prompts."""
        lines = [
            f"- {param_name}: {param.description} ({param.type})"
            for param_name, param in self.parameters.items()
        ]
        params = "\n".join(lines) if lines else "No parameters"
        return f"Tool: {self.name}\nDescription: {self.description}\nParameters:\n{params}"

    def extract_arguments(self, task: str) -> dict[str, Any]:
        """Parse structured arguments out of a free-text task.

        The default extracts nothing. Keys returned here only fill fields
        the caller left empty.
        """
        return {}

    def execute(self, arguments: Mapping[str, Any]) -> str:
        """Run the tool.

        Args:
            arguments: Structured fields and/or a free-text ``task``.

        Returns:
            The tool's textual result. Failures are reported as
            ``"Error: ..."`` strings rather than raised.
        """
        merged = dict(arguments)
        task = merged.get("task")
        try:
            if isinstance(task, str) and task.strip():
                for key, value in self.extract_arguments(task).items():
                    if not merged.get(key):
                        merged[key] = value
            return self._run(merged)
        except Exception as exc:
            logger.error("Tool %s failed: %s", self.name, exc, exc_info=True)
            return f"Error: {exc}"

    @abc.abstractmethod
    def _run(self, arguments: dict[str, Any]) -> str:
        """Do the tool's work on already-extracted arguments."""
