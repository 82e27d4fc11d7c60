"""
Tool registration utilities.

Each module in this package exposes a `register_tools(registry, ...)` function
that adds its tools to the central registry used by the MCP server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from mcp import types

from ..models import ToolArguments


ToolHandler = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class RegisteredTool:
    spec: types.Tool
    arguments_model: Type[ToolArguments]
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.spec.name


class ToolRegistry:
    """
    In-memory registry mapping MCP tool names to their specifications and handlers.

    Tools are listed in registration order.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}

    def add_tool(
        self,
        tool: types.Tool,
        arguments_model: Type[ToolArguments],
        handler: ToolHandler,
    ) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = RegisteredTool(
            spec=tool,
            arguments_model=arguments_model,
            handler=handler,
        )

    def list_tools(self) -> List[types.Tool]:
        return [rt.spec for rt in self._tools.values()]

    def find(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
