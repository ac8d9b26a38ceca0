from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from purchases_sync.ports.date_provider import DateProvider


class ReservedSubscriberAttribute(str, Enum):
    """Attribute keys with backend-defined meaning. Custom keys must not start with ``$``."""

    EMAIL = "$email"
    DISPLAY_NAME = "$displayName"
    PHONE_NUMBER = "$phoneNumber"
    PUSH_TOKEN = "$apnsTokens"
    FCM_TOKENS = "$fcmTokens"
    CONSENT_STATUS = "$attConsentStatus"
    IDFA = "$idfa"
    IDFV = "$idfv"
    IP = "$ip"
    GPS_AD_ID = "$gpsAdId"
    MEDIA_SOURCE = "$mediaSource"
    CAMPAIGN = "$campaign"
    AD_GROUP = "$adGroup"
    AD = "$ad"
    KEYWORD = "$keyword"
    CREATIVE = "$creative"


@dataclass
class SubscriberAttribute:
    """A timestamped key/value fact about a subscriber.

    ``value`` of ``None`` means the attribute was unset. ``is_synced`` is only
    flipped by the backend client once the backend has accepted the attribute.
    """

    key: str
    value: Optional[str]
    set_time: datetime
    is_synced: bool = field(default=False)

    @classmethod
    def create(
        cls,
        key: str | ReservedSubscriberAttribute,
        value: Optional[str],
        date_provider: DateProvider,
    ) -> "SubscriberAttribute":
        if isinstance(key, ReservedSubscriberAttribute):
            key = key.value
        return cls(key=key, value=value, set_time=date_provider.now())

    @property
    def updated_at_ms(self) -> int:
        set_time = self.set_time
        if set_time.tzinfo is None:
            set_time = set_time.replace(tzinfo=timezone.utc)
        return int(set_time.timestamp() * 1000)

    def as_backend_dict(self) -> dict[str, Any]:
        return {"value": self.value, "updated_at_ms": self.updated_at_ms}

    def mark_synced(self) -> None:
        self.is_synced = True


def attributes_to_backend_dict(attributes: Mapping[str, SubscriberAttribute]) -> dict[str, dict[str, Any]]:
    """Encode a key -> attribute map as the backend ``attributes`` object."""
    return {key: attribute.as_backend_dict() for key, attribute in attributes.items()}
