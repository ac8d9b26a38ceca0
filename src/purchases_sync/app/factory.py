from __future__ import annotations

from typing import Optional

import httpx

from purchases_sync.adapters.clock.system_date_provider import SystemDateProvider
from purchases_sync.adapters.http.httpx_client import HttpxHTTPClient
from purchases_sync.application.backend import Backend
from purchases_sync.observability.logging import configure_logging
from purchases_sync.ports.date_provider import DateProvider
from purchases_sync.settings import Settings, get_settings


def create_backend(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    setup_logging: bool = False,
) -> tuple[Backend, DateProvider]:
    """
    Build a Backend wired to the httpx transport, plus the clock used to stamp attributes.

    Settings default to the cached environment settings. ``transport`` lets
    callers substitute an ``httpx.MockTransport``. Root logging is left alone
    unless ``setup_logging`` is set, for applications without their own setup.
    """
    settings = settings or get_settings()
    if not settings.api_key:
        raise ValueError("Missing required setting: PURCHASES_API_KEY")

    if setup_logging:
        configure_logging(settings.log_level)
    http_client = HttpxHTTPClient(settings, transport=transport)
    return Backend(http_client), SystemDateProvider()
