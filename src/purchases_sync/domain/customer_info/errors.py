from __future__ import annotations

from enum import Enum


class CustomerInfoErrorCode(Enum):
    MISSING_JSON_OBJECT = 0
    INVALID_JSON = 1


class CustomerInfoError(Exception):
    """Innermost parsing failure for a customer info payload."""

    def __init__(self, code: CustomerInfoErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
