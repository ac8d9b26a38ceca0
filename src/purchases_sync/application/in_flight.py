from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from purchases_sync.domain.common.ids import RequestFingerprint

logger = logging.getLogger(__name__)


def _deliver(
    waiter: asyncio.Future,
    result: Any,
    error: Optional[BaseException],
    cancelled: bool,
) -> None:
    if waiter.done():
        return
    if cancelled:
        waiter.cancel()
    elif error is not None:
        waiter.set_exception(error)
    else:
        waiter.set_result(result)


@dataclass
class PendingRequest:
    """One network call and everyone waiting on its result."""

    fingerprint: RequestFingerprint
    waiters: List[asyncio.Future] = field(default_factory=list)
    task: Optional[asyncio.Task] = None


class InFlightRequests:
    """Coalesces concurrent requests that share a fingerprint.

    The table is guarded by a lock that is only held while it is mutated, never
    across the network call. The call itself runs in its own task so a waiter
    that gets cancelled does not abort the request for the others.

    Callers may run on different event loops in different threads. The shared
    call runs on the first caller's loop and results are handed to every other
    loop with ``call_soon_threadsafe``. If the shared call is cancelled, every
    remaining waiter is cancelled with it.
    """

    def __init__(self) -> None:
        self._pending: Dict[RequestFingerprint, PendingRequest] = {}
        self._lock = threading.Lock()

    async def run(self, fingerprint: RequestFingerprint, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Await ``operation()``, sharing one execution between identical fingerprints."""
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        with self._lock:
            pending = self._pending.get(fingerprint)
            is_new = pending is None
            if pending is None:
                pending = PendingRequest(fingerprint=fingerprint)
                self._pending[fingerprint] = pending
            pending.waiters.append(waiter)

        if is_new:
            pending.task = loop.create_task(self._execute(fingerprint, operation))
        else:
            logger.debug(
                f"Request already in flight, joining it ({len(pending.waiters)} waiters)",
                extra={"fingerprint": fingerprint.value},
            )

        try:
            return await waiter
        except asyncio.CancelledError:
            self.discard(fingerprint, waiter)
            raise

    async def _execute(self, fingerprint: RequestFingerprint, operation: Callable[[], Awaitable[Any]]) -> None:
        try:
            result = await operation()
        except Exception as e:
            self._resolve(fingerprint, error=e)
        except BaseException:
            # Shared task cancelled (e.g. its loop shut down); remaining waiters are cancelled too
            self._resolve(fingerprint, cancelled=True)
            raise
        else:
            self._resolve(fingerprint, result=result)

    def _resolve(
        self,
        fingerprint: RequestFingerprint,
        result: Any = None,
        error: Optional[BaseException] = None,
        cancelled: bool = False,
    ) -> None:
        with self._lock:
            pending = self._pending.pop(fingerprint, None)
        if pending is None:
            return
        for waiter in pending.waiters:
            # Waiters may belong to event loops running in other threads
            try:
                waiter.get_loop().call_soon_threadsafe(_deliver, waiter, result, error, cancelled)
            except RuntimeError:
                logger.debug(
                    "Waiter's event loop is closed, dropping result",
                    extra={"fingerprint": fingerprint.value},
                )

    def discard(self, fingerprint: RequestFingerprint, waiter: asyncio.Future) -> bool:
        """Stop delivering to ``waiter``; the shared call keeps running for the others."""
        with self._lock:
            pending = self._pending.get(fingerprint)
            if pending is None or waiter not in pending.waiters:
                return False
            pending.waiters.remove(waiter)
            return True

    def is_in_flight(self, fingerprint: RequestFingerprint) -> bool:
        with self._lock:
            return fingerprint in self._pending

    def waiter_count(self, fingerprint: RequestFingerprint) -> int:
        with self._lock:
            pending = self._pending.get(fingerprint)
            return len(pending.waiters) if pending else 0
