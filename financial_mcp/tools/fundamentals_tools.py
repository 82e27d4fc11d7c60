from __future__ import annotations

from typing import Any, Dict

from mcp import types

from ..config import Settings
from ..market_data_client import MarketDataClient
from ..models import CompanyFundamentalsArguments
from ..request_builder import FUNDAMENTAL_ENDPOINTS, build_fundamentals_requests
from . import ToolRegistry


async def _handle_company_fundamentals(
    settings: Settings,
    client: MarketDataClient,
    args: CompanyFundamentalsArguments,
) -> Dict[str, Any]:
    """
    Fetch each requested metric in turn.

    Requests run one after another; the first upstream failure aborts the
    whole call and nothing gathered so far is returned.
    """
    results: Dict[str, Any] = {}
    for request in build_fundamentals_requests(settings, args):
        results[request.label] = await client.fetch(request)
    return results


def register_tools(
    registry: ToolRegistry,
    settings: Settings,
    client: MarketDataClient,
) -> None:
    async def company_fundamentals(args: CompanyFundamentalsArguments) -> Dict[str, Any]:
        return await _handle_company_fundamentals(settings, client, args)

    registry.add_tool(
        types.Tool(
            name="company_fundamentals",
            description="Get company fundamental data from Financial Modeling Prep",
            inputSchema={
                "type": "object",
                "properties": {
                    "symbol": {"type": "string", "description": "Stock ticker symbol"},
                    "metrics": {
                        "type": "array",
                        "items": {
                            "type": "string",
                            "enum": list(FUNDAMENTAL_ENDPOINTS),
                        },
                        "description": "Array of fundamental metrics to retrieve",
                    },
                },
                "required": ["symbol"],
            },
        ),
        CompanyFundamentalsArguments,
        company_fundamentals,
    )
