from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Client settings sourced from environment variables."""

    log_level: str = "INFO"
    api_key: Optional[str] = None
    base_url: str = "https://api.revenuecat.com"
    http_timeout_seconds: float = 20.0
    # Reported to the backend so it can attribute requests to a wrapper SDK
    platform: str = "python"
    platform_flavor: str = "native"
    platform_flavor_version: Optional[str] = None
    sdk_version: str = "0.1.0"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            api_key=os.getenv("PURCHASES_API_KEY"),
            base_url=os.getenv("PURCHASES_BASE_URL", cls.base_url),
            http_timeout_seconds=float(os.getenv("PURCHASES_HTTP_TIMEOUT_SECONDS", cls.http_timeout_seconds)),
            platform=os.getenv("PURCHASES_PLATFORM", cls.platform),
            platform_flavor=os.getenv("PURCHASES_PLATFORM_FLAVOR", cls.platform_flavor),
            platform_flavor_version=os.getenv("PURCHASES_PLATFORM_FLAVOR_VERSION"),
        )


def get_settings(_cache: dict[str, Settings] = {}) -> Settings:
    """Provide a simple cached settings object."""

    if "settings" not in _cache:
        _cache["settings"] = Settings.from_env()
    return _cache["settings"]
