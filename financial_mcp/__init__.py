"""
Financial MCP server package.

This package exposes MCP tools for:
- Stock price time series (Alpha Vantage)
- Company fundamentals: profile, statements and ratios (Financial Modeling Prep)

Each tool forwards a call to the upstream HTTP API and returns its JSON body.
Tools are declared in `financial_mcp.tools`, dispatched by
`financial_mcp.dispatcher` and served over stdio or HTTP/SSE.
"""

__version__ = "0.1.0"
