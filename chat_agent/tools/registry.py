"""
Tool Registry - Single source of truth for tool definitions.

Provides a central registry for the agent's tools with their metadata
and handlers. Every handler takes the decision's input string and returns
an Observation dict; ``dispatch`` never lets an exception escape.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: str
    description: str
    input_hint: str
    handler: Callable[[str], dict]


class ToolRegistry:
    """Central registry for all tools, keyed by lower-cased name."""

    _tools: dict[str, ToolDefinition] = {}

    @classmethod
    def register(
        cls,
        name: str,
        description: str,
        input_hint: str,
        handler: Callable[[str], dict],
    ) -> None:
        """Register a tool with its metadata."""
        cls._tools[name.lower()] = ToolDefinition(
            name=name,
            description=description,
            input_hint=input_hint,
            handler=handler,
        )

    @classmethod
    def get(cls, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name, ignoring case."""
        return cls._tools.get(name.strip().lower())

    @classmethod
    def all_tools(cls) -> dict[str, ToolDefinition]:
        """Get a copy of all registered tools."""
        return cls._tools.copy()

    @classmethod
    def dispatch(cls, name: str, tool_input: str) -> dict:
        """
        Run a tool and return its Observation.

        Unknown names and handler exceptions become error observations.
        """
        tool = cls.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return {"error": "unknown tool"}

        try:
            return tool.handler(tool_input)
        except Exception as e:
            logger.error(f"Tool execution failed: {tool.name} - {e}")
            return {"error": "Tool execution failed", "detail": str(e)}

    @classmethod
    def get_tools_summary(cls) -> str:
        """Get formatted summary of all tools for prompts."""
        lines = []
        for tool in cls._tools.values():
            lines.append(f"- {tool.name}: {tool.description} (input: {tool.input_hint})")
        return "\n".join(lines)

    @classmethod
    def clear(cls) -> None:
        """Clear all registered tools (mainly for testing)."""
        cls._tools.clear()
