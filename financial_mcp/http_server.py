from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .config import RuntimeContext, Settings
from .dispatcher import ToolDispatcher
from .main import SERVER_NAME, SERVER_VERSION, create_dispatcher
from .market_data_client import MarketDataClient

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def _rpc_error(message_id: Any, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": message_id,
        "error": {"code": code, "message": message},
    }


def _rpc_result(message_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "result": result}


def create_http_app(
    settings: Settings,
    client: Optional[MarketDataClient] = None,
) -> FastAPI:
    """
    Create FastAPI app that wraps the tool dispatcher for HTTP/SSE transport.

    MCP over HTTP/SSE:
    - Client sends POST requests with JSON-RPC messages in body
    - Server responds with SSE stream containing JSON-RPC responses
    - Each SSE event format: "data: <json-rpc-response>\\n\\n"
    """
    owns_client = client is None
    if client is None:
        client = MarketDataClient(settings)
    dispatcher = create_dispatcher(settings, client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        # A client handed in by the caller is closed by the caller.
        if owns_client:
            await client.aclose()

    app = FastAPI(
        title="Financial MCP Server",
        version=SERVER_VERSION,
        description="MCP tools for stock prices and company fundamentals",
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher
    app.state.market_data_client = client

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "service": SERVER_NAME}

    @app.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": SERVER_NAME,
            "version": SERVER_VERSION,
            "protocol": "mcp",
            "transport": "http/sse",
            "endpoints": {
                "health": "/health",
                "mcp_stream": "/mcp/stream",
            },
        }

    @app.post("/mcp/stream")
    async def mcp_stream(request: Request):
        """
        MCP SSE stream endpoint.

        Supported MCP methods:
        - initialize: Server initialization handshake
        - tools/list: List available tools
        - tools/call: Execute a tool
        """
        body = await request.body()
        if not body:
            return JSONResponse(
                _rpc_error(None, INVALID_REQUEST, "Invalid Request: empty body"),
                status_code=400,
            )
        try:
            message = json.loads(body)
        except json.JSONDecodeError as e:
            return JSONResponse(
                _rpc_error(None, PARSE_ERROR, f"Parse error: {e}"),
                status_code=400,
            )

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            message_id = message.get("id") if isinstance(message, dict) else None
            return JSONResponse(
                _rpc_error(message_id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'"),
                status_code=400,
            )

        method = message.get("method")
        message_id = message.get("id")
        params = message.get("params") or {}
        if not method:
            return JSONResponse(
                _rpc_error(message_id, INVALID_REQUEST, "Invalid Request: method is required"),
                status_code=400,
            )

        async def generate_sse() -> AsyncIterator[str]:
            response = await handle_mcp_request(dispatcher, method, params, message_id)
            yield f"data: {json.dumps(response)}\n\n"

        return StreamingResponse(
            generate_sse(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering
            },
        )

    return app


async def handle_mcp_request(
    dispatcher: ToolDispatcher,
    method: str,
    params: dict[str, Any],
    message_id: Any,
) -> dict[str, Any]:
    """
    Handle one MCP JSON-RPC request.

    Tool failures come back from the dispatcher as error results, so
    `tools/call` always answers with a `result`.
    """
    try:
        if method == "initialize":
            return _rpc_result(
                message_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {"listChanged": False}},
                    "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                },
            )

        if method == "tools/list":
            tools = dispatcher.list_tools()
            return _rpc_result(
                message_id,
                {"tools": [tool.model_dump(by_alias=True, exclude_none=True) for tool in tools]},
            )

        if method == "tools/call":
            tool_name = params.get("name")
            if not tool_name:
                return _rpc_error(message_id, INVALID_PARAMS, "Invalid params: 'name' is required")
            result = await dispatcher.call_tool(tool_name, params.get("arguments"))
            return _rpc_result(message_id, result.model_dump(by_alias=True, exclude_none=True))

        return _rpc_error(message_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    except Exception as e:
        logger.exception("Error handling MCP method %s", method)
        return _rpc_error(message_id, INTERNAL_ERROR, f"Internal error: {e}")


async def run_http_server(context: RuntimeContext) -> None:
    """Run the HTTP server using uvicorn."""
    import uvicorn

    settings = context.settings
    app = create_http_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.mcp_host,
        port=settings.mcp_port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
    server = uvicorn.Server(config)
    await server.serve()
