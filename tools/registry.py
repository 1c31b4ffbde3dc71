"""Tool registry: definitions the model sees, executors the bot runs."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from llm import ToolDefinition

logger = logging.getLogger(__name__)

# Category the bot offers to the model during a reply
SEARCH_CATEGORY = "search"


def to_json_schema(parameters: Mapping) -> dict:
    """Convert a flat parameter spec into a JSON-Schema object.

    Flat specs map each parameter name to {'type', 'description', 'required'}.
    A mapping that already looks like a schema (type=object with properties)
    is returned unchanged.
    """
    if parameters.get("type") == "object" and "properties" in parameters:
        return dict(parameters)

    schema: dict = {"type": "object", "properties": {}, "required": []}
    for name, spec in parameters.items():
        prop = {
            "type": spec.get("type", "string"),
            "description": spec.get("description", ""),
        }
        for key in ("minimum", "maximum", "default", "enum"):
            if key in spec:
                prop[key] = spec[key]
        schema["properties"][name] = prop
        if spec.get("required"):
            schema["required"].append(name)
    return schema


@dataclass
class RegisteredTool:
    name: str
    description: str
    parameters: dict
    executor: Callable[[dict], Any]
    category: str = "general"
    hidden_parameters: tuple[str, ...] = field(default_factory=tuple)

    def definition(self) -> ToolDefinition:
        schema = to_json_schema(self.parameters)
        # Parameters injected by the host are not offered to the model
        for name in self.hidden_parameters:
            schema["properties"].pop(name, None)
            if name in schema.get("required", []):
                schema["required"].remove(name)
        return ToolDefinition(name=self.name, description=self.description, parameters=schema)


class ToolRegistry:
    """Name → tool mapping. Executors are plain callables taking a parameter dict."""

    def __init__(self):
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        description: str,
        parameters: Mapping,
        executor: Callable[[dict], Any],
        category: str = "general",
        hidden_parameters: tuple[str, ...] = (),
    ) -> None:
        self._tools[name] = RegisteredTool(
            name=name,
            description=description,
            parameters=dict(parameters),
            executor=executor,
            category=category,
            hidden_parameters=tuple(hidden_parameters),
        )

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self, category: str | None = None) -> list[ToolDefinition]:
        """Return tool definitions, optionally only those in `category`."""
        return [
            tool.definition()
            for tool in self._tools.values()
            if category is None or tool.category == category
        ]

    def execute(self, tool_name: str, parameters: Mapping) -> Any:
        """Execute a tool by name and return its result.

        Failures are returned as {'error': ...} dicts so the conversation can
        continue; nothing is raised.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            logger.warning("Model requested unknown tool %r", tool_name)
            return {"error": f"Unknown tool: {tool_name}"}
        try:
            return tool.executor(dict(parameters))
        except Exception as exc:
            logger.exception("Tool %s failed", tool_name)
            return {"error": f"Tool execution failed: {str(exc)}"}
