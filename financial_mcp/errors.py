from __future__ import annotations

from typing import Optional


class FinancialMCPError(Exception):
    """Base class for errors raised by the Financial MCP server."""


class ConfigurationError(FinancialMCPError):
    """A required setting (usually an API key) is missing or invalid."""


class ToolArgumentError(FinancialMCPError):
    """Tool arguments did not match the tool's input contract."""

    def __init__(self, tool_name: str, details: str) -> None:
        super().__init__(f"Invalid arguments for {tool_name}: {details}")
        self.tool_name = tool_name
        self.details = details


class UpstreamHTTPError(FinancialMCPError):
    """
    An upstream API answered with a non-success status.

    `label` names the sub-request (e.g. a fundamentals metric) when one call
    issues several requests.
    """

    def __init__(
        self,
        api: str,
        status_code: int,
        reason: str,
        label: Optional[str] = None,
    ) -> None:
        where = f"{api} API error for {label}" if label else f"{api} API error"
        super().__init__(f"{where}: {reason}")
        self.api = api
        self.status_code = status_code
        self.reason = reason
        self.label = label


class UpstreamTransportError(FinancialMCPError):
    """Talking to an upstream API failed (connection, protocol or JSON decoding)."""

    def __init__(self, api: str, message: str) -> None:
        super().__init__(f"{api} API request failed: {message}")
        self.api = api
