from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import UpstreamHTTPError, UpstreamTransportError
from .request_builder import OutboundRequest

logger = logging.getLogger(__name__)


class TextBody(str):
    """Upstream body returned as text (e.g. CSV) rather than decoded JSON."""


class MarketDataClient:
    """
    Async HTTP client shared by all tool handlers.

    Wraps a single `httpx.AsyncClient`; requests are never retried and no
    timeout is applied unless `Settings.request_timeout` is set.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def fetch(self, request: OutboundRequest) -> Any:
        """
        Execute one outbound request and return its decoded body.

        JSON bodies are parsed; requests built with `expect_json=False`
        return the body as `TextBody`.
        """
        logger.debug("GET %s (%s)", request.url, request.api)
        try:
            response = await self._client.get(request.url, params=request.params)
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(
                request.api, str(exc) or exc.__class__.__name__
            ) from exc

        if not response.is_success:
            raise UpstreamHTTPError(
                api=request.api,
                status_code=response.status_code,
                reason=response.reason_phrase or str(response.status_code),
                label=request.label,
            )

        if not request.expect_json:
            return TextBody(response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamTransportError(
                request.api, f"malformed JSON response ({exc})"
            ) from exc

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
