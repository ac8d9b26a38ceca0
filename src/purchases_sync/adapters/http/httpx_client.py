from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from purchases_sync.ports.http_client import HTTPClient, HTTPResponse, TransportError
from purchases_sync.settings import Settings

logger = logging.getLogger(__name__)


def default_headers(settings: Settings) -> dict[str, str]:
    """Headers sent with every backend request."""
    headers = {
        "Content-Type": "application/json",
        "X-Platform": settings.platform,
        "X-Platform-Flavor": settings.platform_flavor,
        "X-Version": settings.sdk_version,
    }
    if settings.platform_flavor_version:
        headers["X-Platform-Flavor-Version"] = settings.platform_flavor_version
    if settings.api_key:
        headers["Authorization"] = f"Bearer {settings.api_key}"
    return headers


class HttpxHTTPClient(HTTPClient):
    """HTTPClient backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            headers=default_headers(settings),
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HTTPResponse:
        try:
            response = await self._client.request(method, path, content=body, headers=dict(headers or {}))
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed before a response was received: {e!r}")
            raise TransportError(f"{method} {path}: {e}") from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        return HTTPResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpxHTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
