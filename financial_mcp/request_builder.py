"""
Outbound request composition.

Pure functions that turn validated tool arguments plus `Settings` into the
HTTP requests sent to Alpha Vantage and Financial Modeling Prep. Nothing in
here performs I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import quote

from .config import Settings
from .models import CompanyFundamentalsArguments, StockPriceArguments

logger = logging.getLogger(__name__)

ALPHA_VANTAGE = "Alpha Vantage"
FMP = "FMP"

DEFAULT_INTRADAY_INTERVAL = "5min"
DEFAULT_METRICS = ("overview",)

FUNDAMENTAL_ENDPOINTS: Dict[str, str] = {
    "overview": "/profile/{symbol}",
    "income": "/income-statement/{symbol}",
    "balance": "/balance-sheet-statement/{symbol}",
    "cash": "/cash-flow-statement/{symbol}",
    "ratios": "/ratios/{symbol}",
}


@dataclass(frozen=True)
class OutboundRequest:
    """A single GET request against one upstream API."""

    api: str
    url: str
    params: Dict[str, str] = field(default_factory=dict)
    label: Optional[str] = None
    expect_json: bool = True


def build_stock_price_request(
    settings: Settings,
    args: StockPriceArguments,
) -> OutboundRequest:
    # Insertion order is the query string order.
    params: Dict[str, str] = {
        "apikey": settings.alpha_vantage_api_key,
        "symbol": args.symbol,
    }
    if args.interval == "daily":
        params["function"] = "TIME_SERIES_DAILY"
    else:
        params["function"] = "TIME_SERIES_INTRADAY"
        params["interval"] = args.interval or DEFAULT_INTRADAY_INTERVAL

    if args.output_size:
        params["outputsize"] = args.output_size
    if args.data_type:
        params["datatype"] = args.data_type

    return OutboundRequest(
        api=ALPHA_VANTAGE,
        url=settings.alpha_vantage_base_url,
        params=params,
        expect_json=args.data_type != "csv",
    )


def build_fundamentals_requests(
    settings: Settings,
    args: CompanyFundamentalsArguments,
) -> List[OutboundRequest]:
    """
    One request per requested metric, in the caller's order.

    Metrics without an endpoint are skipped rather than rejected.
    """
    metrics = args.metrics if args.metrics is not None else list(DEFAULT_METRICS)
    base_url = settings.fmp_base_url.rstrip("/")

    requests: List[OutboundRequest] = []
    for metric in metrics:
        template = FUNDAMENTAL_ENDPOINTS.get(metric)
        if template is None:
            logger.debug("Skipping unknown fundamentals metric %r", metric)
            continue
        requests.append(
            OutboundRequest(
                api=FMP,
                url=base_url + template.format(symbol=quote(args.symbol, safe="")),
                params={"apikey": settings.fmp_api_key},
                label=metric,
            )
        )
    return requests
