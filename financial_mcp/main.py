from __future__ import annotations

import logging
import sys
from typing import Any, Dict, List, Optional

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .config import RuntimeContext, Settings, load_settings
from .dispatcher import ToolDispatcher
from .errors import ConfigurationError
from .market_data_client import MarketDataClient
from .tools import ToolRegistry
from .tools import fundamentals_tools, price_tools

SERVER_NAME = "financial-mcp-server"
SERVER_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the stdio protocol, so logs go to stderr.
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs full request URLs at INFO, and those carry the API keys.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_dispatcher(settings: Settings, client: MarketDataClient) -> ToolDispatcher:
    """
    Build the tool registry for all tool groups and wrap it in a dispatcher.
    """
    registry = ToolRegistry()

    # Register tool groups
    price_tools.register_tools(registry, settings=settings, client=client)
    fundamentals_tools.register_tools(registry, settings=settings, client=client)

    return ToolDispatcher(registry)


def create_server(
    settings: Settings,
    client: Optional[MarketDataClient] = None,
) -> Server:
    """
    Create and configure the MCP server with all registered tools.
    """
    client = client or MarketDataClient(settings)
    dispatcher = create_dispatcher(settings, client)

    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return dispatcher.list_tools()

    # Arguments are validated by the dispatcher against each tool's model.
    @server.call_tool(validate_input=False)
    async def call_tool(
        name: str,
        arguments: Optional[Dict[str, Any]],
    ) -> types.CallToolResult:
        return await dispatcher.call_tool(name, arguments)

    return server


async def run_stdio_server(context: RuntimeContext) -> None:
    client = MarketDataClient(context.settings)
    try:
        server = create_server(context.settings, client)
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Financial MCP server running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await client.aclose()


def main() -> None:
    """
    Entrypoint for running the MCP server.

    Supports two transport modes:
    - stdio: For direct process-to-process communication (default)
    - http: For HTTP/SSE transport behind reverse proxy
    """
    configure_logging()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    context = RuntimeContext(settings=settings)

    try:
        if settings.mcp_transport == "http":
            from .http_server import run_http_server

            anyio.run(run_http_server, context)
        else:
            anyio.run(run_stdio_server, context)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
