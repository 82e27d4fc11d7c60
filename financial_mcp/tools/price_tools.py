from __future__ import annotations

from typing import Any, Dict

from mcp import types

from ..config import Settings
from ..market_data_client import MarketDataClient
from ..models import StockPriceArguments
from ..request_builder import build_stock_price_request
from . import ToolRegistry


def price_tools(settings: Settings, client: MarketDataClient) -> Dict[str, Any]:
    """
    Factory to produce handlers bound to the settings and HTTP client.
    """

    async def stock_price(args: StockPriceArguments) -> Any:
        request = build_stock_price_request(settings, args)
        return await client.fetch(request)

    stock_price_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "symbol": {"type": "string", "description": "Stock ticker symbol"},
            "interval": {
                "type": "string",
                "enum": ["1min", "5min", "15min", "30min", "60min", "daily"],
                "description": "Time interval between data points",
            },
            "outputSize": {
                "type": "string",
                "enum": ["compact", "full"],
                "description": "Amount of data to return (compact = last 100 points, full = all data)",
            },
            "dataType": {
                "type": "string",
                "enum": ["json", "csv"],
                "description": "Response data format",
            },
        },
        "required": ["symbol"],
    }

    return {
        "stock_price": {
            "schema": stock_price_schema,
            "arguments": StockPriceArguments,
            "handler": stock_price,
            "description": "Get real-time and historical stock price data from Alpha Vantage",
        },
    }


def register_tools(
    registry: ToolRegistry,
    settings: Settings,
    client: MarketDataClient,
) -> None:
    tool_defs = price_tools(settings, client)
    for name, meta in tool_defs.items():
        registry.add_tool(
            types.Tool(
                name=name,
                description=meta["description"],
                inputSchema=meta["schema"],
            ),
            meta["arguments"],
            meta["handler"],
        )
