from .arguments import (
    CompanyFundamentalsArguments,
    StockPriceArguments,
    ToolArguments,
)

__all__ = [
    "CompanyFundamentalsArguments",
    "StockPriceArguments",
    "ToolArguments",
]
