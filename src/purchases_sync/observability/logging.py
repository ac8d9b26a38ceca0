from __future__ import annotations

import logging
import sys
from typing import Optional

from purchases_sync.settings import get_settings

# httpx and httpcore log every request line at INFO/DEBUG
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: Optional[str] = None, transport_level: str = "WARNING") -> None:
    """Configure root logging for the sync client.

    The transport libraries are pinned to ``transport_level`` so request logs
    come from ``purchases_sync.application.backend`` only, with the app user id
    and fingerprint attached as ``extra`` fields.
    """
    settings = get_settings()
    log_level = level or settings.log_level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stdout,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
