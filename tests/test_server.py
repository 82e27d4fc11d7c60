import json

import pytest
from fastapi.testclient import TestClient
from mcp import types

from financial_mcp.config import Settings
from financial_mcp.http_server import create_http_app
from financial_mcp.main import SERVER_NAME, create_server
from financial_mcp.market_data_client import MarketDataClient

from .conftest import UpstreamRecorder


def _sse_payload(response) -> dict:
    assert response.headers["content-type"].startswith("text/event-stream")
    line = response.text.strip()
    assert line.startswith("data: ")
    return json.loads(line[len("data: "):])


def _rpc(http: TestClient, method: str, params: dict | None = None, message_id: int = 1):
    message = {"jsonrpc": "2.0", "id": message_id, "method": method}
    if params is not None:
        message["params"] = params
    return http.post("/mcp/stream", json=message)


@pytest.fixture
def http(settings: Settings, client: MarketDataClient) -> TestClient:
    return TestClient(create_http_app(settings, client))


@pytest.mark.anyio
async def test_mcp_server_lists_and_calls_tools(
    settings: Settings, client: MarketDataClient, upstream: UpstreamRecorder
) -> None:
    server = create_server(settings, client)
    assert server.name == SERVER_NAME

    listed = await server.request_handlers[types.ListToolsRequest](
        types.ListToolsRequest(method="tools/list")
    )
    assert [t.name for t in listed.root.tools] == ["stock_price", "company_fundamentals"]

    called = await server.request_handlers[types.CallToolRequest](
        types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="missing", arguments={}),
        )
    )
    assert called.root.isError is True
    assert called.root.content[0].text == "Unknown tool: missing"
    assert upstream.requests == []


def test_health_and_root(http: TestClient) -> None:
    assert http.get("/health").json() == {"status": "ok", "service": SERVER_NAME}
    assert http.get("/").json()["endpoints"]["mcp_stream"] == "/mcp/stream"


def test_initialize(http: TestClient) -> None:
    payload = _sse_payload(_rpc(http, "initialize", {}))

    assert payload["id"] == 1
    assert payload["result"]["serverInfo"]["name"] == SERVER_NAME
    assert payload["result"]["capabilities"] == {"tools": {"listChanged": False}}


def test_tools_list_over_http(http: TestClient) -> None:
    payload = _sse_payload(_rpc(http, "tools/list"))

    tools = payload["result"]["tools"]
    assert [t["name"] for t in tools] == ["stock_price", "company_fundamentals"]
    assert tools[0]["inputSchema"]["required"] == ["symbol"]


def test_tools_call_over_http(http: TestClient, upstream: UpstreamRecorder) -> None:
    upstream.route("/api/v3/profile/AAPL", json=[{"symbol": "AAPL"}])

    payload = _sse_payload(
        _rpc(http, "tools/call", {"name": "company_fundamentals", "arguments": {"symbol": "AAPL"}}, message_id=7)
    )

    assert payload["id"] == 7
    result = payload["result"]
    assert result["isError"] is False
    assert json.loads(result["content"][0]["text"]) == {"overview": [{"symbol": "AAPL"}]}


def test_tool_failure_over_http_is_error_result(http: TestClient, upstream: UpstreamRecorder) -> None:
    upstream.route("/query", status_code=429, json={})

    payload = _sse_payload(_rpc(http, "tools/call", {"name": "stock_price", "arguments": {"symbol": "IBM"}}))

    assert "error" not in payload
    assert payload["result"]["isError"] is True
    assert payload["result"]["content"][0]["text"] == "API error: Alpha Vantage API error: Too Many Requests"


def test_tools_call_requires_name(http: TestClient) -> None:
    payload = _sse_payload(_rpc(http, "tools/call", {"arguments": {}}))

    assert payload["error"]["code"] == -32602


def test_unknown_method(http: TestClient) -> None:
    payload = _sse_payload(_rpc(http, "prompts/list"))

    assert payload["error"]["code"] == -32601


def test_malformed_messages_rejected(http: TestClient) -> None:
    parse_error = http.post("/mcp/stream", content=b"{not json")
    wrong_version = http.post("/mcp/stream", json={"jsonrpc": "1.0", "id": 3, "method": "tools/list"})
    no_method = http.post("/mcp/stream", json={"jsonrpc": "2.0", "id": 4})

    assert parse_error.status_code == 400
    assert parse_error.json()["error"]["code"] == -32700
    assert wrong_version.status_code == 400
    assert wrong_version.json()["error"]["code"] == -32600
    assert wrong_version.json()["id"] == 3
    assert no_method.json()["error"]["code"] == -32600


def test_lifespan_leaves_callers_client_open(settings: Settings, client: MarketDataClient) -> None:
    with TestClient(create_http_app(settings, client)) as http:
        assert http.get("/health").status_code == 200

    assert client.is_closed is False


def test_lifespan_closes_its_own_client(settings: Settings) -> None:
    app = create_http_app(settings)

    with TestClient(app) as http:
        assert http.get("/health").status_code == 200

    assert app.state.market_data_client.is_closed is True
