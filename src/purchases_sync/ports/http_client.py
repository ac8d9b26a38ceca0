from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol


class TransportError(Exception):
    """Raised by an HTTPClient when no response was received (connectivity, timeout)."""


@dataclass(frozen=True)
class HTTPResponse:
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class HTTPClient(Protocol):
    async def request(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HTTPResponse: ...

    async def aclose(self) -> None: ...
