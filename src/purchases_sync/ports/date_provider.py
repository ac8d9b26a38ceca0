from __future__ import annotations

from datetime import datetime
from typing import Protocol


class DateProvider(Protocol):
    def now(self) -> datetime: ...
