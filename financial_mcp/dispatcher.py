from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from mcp import types
from pydantic import ValidationError

from .errors import FinancialMCPError, ToolArgumentError
from .market_data_client import TextBody
from .tools import ToolRegistry

logger = logging.getLogger(__name__)


def _text_result(text: str, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def serialize_result(result: Any) -> str:
    """
    Render a handler result as the text of a tool response.

    Text bodies (CSV) pass through; everything else, JSON strings included,
    is pretty-printed JSON.
    """
    if isinstance(result, TextBody):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False)


class ToolDispatcher:
    """
    Routes MCP `tools/list` and `tools/call` requests to the tool registry.

    Every call produces exactly one `CallToolResult`. Unknown tools, invalid
    arguments and handler failures are reported as error results
    (`isError=True`) rather than raised.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def list_tools(self) -> List[types.Tool]:
        return self._registry.list_tools()

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> types.CallToolResult:
        tool = self._registry.find(name)
        if tool is None:
            logger.info("Call to unknown tool %r", name)
            return _text_result(f"Unknown tool: {name}", is_error=True)

        try:
            args = tool.arguments_model.model_validate(arguments or {})
        except ValidationError as exc:
            error = ToolArgumentError(name, _format_validation_error(exc))
            logger.info("%s", error)
            return _text_result(str(error), is_error=True)

        try:
            result = await tool.handler(args)
            text = serialize_result(result)
        except FinancialMCPError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return _text_result(f"API error: {_error_message(exc)}", is_error=True)
        except Exception as exc:
            logger.exception("Error executing tool %s", name)
            return _text_result(f"API error: {_error_message(exc)}", is_error=True)

        return _text_result(text)
