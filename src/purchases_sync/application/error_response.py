"""Decoding of structured backend error bodies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from purchases_sync.adapters.http.json_codec import decode_json
from purchases_sync.application.errors import (
    AttributeValidationError,
    BackendError,
    ErrorCode,
    UnknownBackendError,
)

logger = logging.getLogger(__name__)

ATTRIBUTE_ERRORS_KEY = "attribute_errors"


class BackendErrorCode(Enum):
    """Error codes the backend puts in the ``code`` field of an error body."""

    UNKNOWN = 0
    INVALID_PLATFORM = 7000
    STORE_PROBLEM = 7101
    CANNOT_TRANSFER_PURCHASE = 7102
    INVALID_RECEIPT_TOKEN = 7103
    INVALID_APP_STORE_SHARED_SECRET = 7104
    INVALID_PAYMENT_MODE_OR_INTRO_PRICE_NOT_PROVIDED = 7105
    EMPTY_APP_USER_ID = 7220
    INVALID_AUTH_TOKEN = 7224
    INVALID_API_KEY = 7225
    BAD_REQUEST = 7226
    INVALID_SUBSCRIBER_ATTRIBUTES = 7263
    INVALID_SUBSCRIBER_ATTRIBUTES_BODY = 7264

    @classmethod
    def parse(cls, raw: Any) -> "BackendErrorCode":
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            return cls.UNKNOWN

    def to_error_code(self) -> ErrorCode:
        return _ERROR_CODE_BY_BACKEND_CODE.get(self, ErrorCode.UNKNOWN_BACKEND_ERROR)


_ERROR_CODE_BY_BACKEND_CODE = {
    BackendErrorCode.STORE_PROBLEM: ErrorCode.STORE_PROBLEM_ERROR,
    BackendErrorCode.CANNOT_TRANSFER_PURCHASE: ErrorCode.RECEIPT_ALREADY_IN_USE_ERROR,
    BackendErrorCode.INVALID_RECEIPT_TOKEN: ErrorCode.INVALID_RECEIPT_ERROR,
    BackendErrorCode.INVALID_APP_STORE_SHARED_SECRET: ErrorCode.INVALID_CREDENTIALS_ERROR,
    BackendErrorCode.EMPTY_APP_USER_ID: ErrorCode.INVALID_APP_USER_ID_ERROR,
    BackendErrorCode.INVALID_AUTH_TOKEN: ErrorCode.INVALID_CREDENTIALS_ERROR,
    BackendErrorCode.INVALID_API_KEY: ErrorCode.INVALID_CREDENTIALS_ERROR,
    BackendErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES: ErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES_ERROR,
    BackendErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES_BODY: ErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES_ERROR,
}


def parse_attribute_errors(raw: Any) -> dict[str, str]:
    """Turn ``[{"key_name": ..., "message": ...}]`` into ``{key_name: message}``.

    Successful receipt responses nest the list one level deeper, under
    ``{"attribute_errors": [...]}``; both shapes are accepted.
    """
    if isinstance(raw, dict):
        raw = raw.get(ATTRIBUTE_ERRORS_KEY)
    if not isinstance(raw, list):
        return {}
    errors: dict[str, str] = {}
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        key_name = entry.get("key_name")
        message = entry.get("message")
        if isinstance(key_name, str) and isinstance(message, str):
            errors[key_name] = message
    return errors


def is_successfully_synced(status_code: int) -> bool:
    """Whether the backend durably received a request that came back with ``status_code``."""
    return status_code < 500 and status_code != 404


@dataclass(frozen=True)
class ErrorResponse:
    code: BackendErrorCode = BackendErrorCode.UNKNOWN
    message: Optional[str] = None
    attribute_errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ErrorResponse":
        if not isinstance(data, dict):
            return cls()
        message = data.get("message")
        return cls(
            code=BackendErrorCode.parse(data.get("code")),
            message=message if isinstance(message, str) else None,
            attribute_errors=parse_attribute_errors(data.get(ATTRIBUTE_ERRORS_KEY)),
        )

    @classmethod
    def from_body(cls, body: bytes | str | None) -> "ErrorResponse":
        """Decode an error body; bodies that are not JSON objects decode to an empty response."""
        if not body:
            return cls()
        try:
            data = decode_json(body)
        except ValueError:
            logger.debug("Backend error body is not valid JSON")
            return cls()
        return cls.from_dict(data)

    def as_backend_error(self, status_code: int) -> BackendError:
        code = self.code.to_error_code()
        message = self.message or f"Backend responded with status {status_code}"
        error_cls = {
            ErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES_ERROR: AttributeValidationError,
            ErrorCode.UNKNOWN_BACKEND_ERROR: UnknownBackendError,
        }.get(code, BackendError)
        return error_cls(
            message,
            code=code,
            status_code=status_code,
            successfully_synced=is_successfully_synced(status_code),
            attribute_errors=self.attribute_errors,
        )
