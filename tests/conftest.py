from typing import Any

import httpx
import pytest

from financial_mcp.config import Settings
from financial_mcp.dispatcher import ToolDispatcher
from financial_mcp.main import create_dispatcher
from financial_mcp.market_data_client import MarketDataClient


class UpstreamRecorder:
    """
    `httpx.MockTransport` handler standing in for both upstream APIs.

    Responses are keyed by URL path; unknown paths answer 200 with a body
    echoing the path.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, tuple[int, dict[str, Any]]] = {}

    def route(self, path: str, status_code: int = 200, json: Any = None, text: str | None = None) -> None:
        body = {"text": text} if text is not None else {"json": json}
        self._routes[path] = (status_code, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        default = (200, {"json": {"path": request.url.path}})
        status_code, body = self._routes.get(request.url.path, default)
        return httpx.Response(status_code, **body)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def params(self, index: int = -1) -> list[tuple[str, str]]:
        return list(self.requests[index].url.params.multi_items())


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        alpha_vantage_api_key="av-test-key",
        fmp_api_key="fmp-test-key",
        _env_file=None,
    )


@pytest.fixture
def upstream() -> UpstreamRecorder:
    return UpstreamRecorder()


@pytest.fixture
def client(settings: Settings, upstream: UpstreamRecorder) -> MarketDataClient:
    return MarketDataClient(settings, transport=httpx.MockTransport(upstream))


@pytest.fixture
def dispatcher(settings: Settings, client: MarketDataClient) -> ToolDispatcher:
    return create_dispatcher(settings, client)
