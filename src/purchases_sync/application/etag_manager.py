from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from purchases_sync.ports.http_client import HTTPResponse

logger = logging.getLogger(__name__)

ETAG_REQUEST_HEADER = "X-RevenueCat-ETag"
ETAG_RESPONSE_HEADER = "X-RevenueCat-ETag"
NOT_MODIFIED = 304


@dataclass(frozen=True)
class CachedResponse:
    etag: str
    status_code: int
    body: bytes
    stored_at: float


class ETagManager:
    """Remembers the last successful response per path.

    The stored ETag is sent with the next request to the same path; a 304
    answer is swapped for the cached response so callers never see it.
    """

    def __init__(self) -> None:
        self._responses: Dict[str, CachedResponse] = {}
        self._lock = threading.Lock()

    def request_headers(self, path: str, refresh: bool = False) -> dict[str, str]:
        if refresh:
            return {ETAG_REQUEST_HEADER: ""}
        with self._lock:
            cached = self._responses.get(path)
        return {ETAG_REQUEST_HEADER: cached.etag if cached else ""}

    def resolve(self, path: str, response: HTTPResponse) -> Optional[HTTPResponse]:
        """Return the response callers should see, or None when a 304 has nothing cached.

        Stores 2xx responses that carry an ETag.
        """
        if response.status_code == NOT_MODIFIED:
            with self._lock:
                cached = self._responses.get(path)
            if cached is None:
                logger.warning(f"Received 304 for {path} without a cached response")
                return None
            logger.debug(f"Using cached response for {path}")
            return HTTPResponse(status_code=cached.status_code, body=cached.body, headers=dict(response.headers))

        etag = response.header(ETAG_RESPONSE_HEADER)
        if response.is_success and etag:
            with self._lock:
                self._responses[path] = CachedResponse(
                    etag=etag,
                    status_code=response.status_code,
                    body=response.body,
                    stored_at=time.time(),
                )
        return response

    def clear(self, path: Optional[str] = None) -> None:
        with self._lock:
            if path is None:
                self._responses.clear()
            else:
                self._responses.pop(path, None)
