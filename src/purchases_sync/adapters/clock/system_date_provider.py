from __future__ import annotations

from datetime import datetime, timezone

from purchases_sync.ports.date_provider import DateProvider


class SystemDateProvider(DateProvider):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
