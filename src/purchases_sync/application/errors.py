from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional


class ErrorCode(Enum):
    """Error kinds surfaced to callers of the backend client."""

    UNKNOWN_ERROR = 0
    STORE_PROBLEM_ERROR = 2
    RECEIPT_ALREADY_IN_USE_ERROR = 6
    INVALID_RECEIPT_ERROR = 8
    MISSING_RECEIPT_FILE_ERROR = 9
    NETWORK_ERROR = 10
    INVALID_CREDENTIALS_ERROR = 11
    UNEXPECTED_BACKEND_RESPONSE_ERROR = 12
    INVALID_APP_USER_ID_ERROR = 14
    UNKNOWN_BACKEND_ERROR = 16
    INVALID_SUBSCRIBER_ATTRIBUTES_ERROR = 21


class UnexpectedBackendResponseSubErrorCode(Enum):
    """Which decoding step rejected a response the backend reported as successful."""

    CUSTOMER_INFO_RESPONSE_PARSING = 3
    POST_ATTRIBUTES_RESPONSE_PARSING = 5


class PurchasesError(Exception):
    """Base class for every error delivered by the backend client.

    ``successfully_synced`` tells the caller whether the backend durably
    received the request, independently of whether it also reported a problem
    with it. ``underlying_error`` links to the layer that caused this one and is
    mirrored on ``__cause__``.
    """

    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        underlying_error: Optional[BaseException] = None,
        successfully_synced: bool = False,
        attribute_errors: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.underlying_error = underlying_error
        self.successfully_synced = successfully_synced
        self.attribute_errors: dict[str, str] = dict(attribute_errors or {})
        if underlying_error is not None:
            self.__cause__ = underlying_error

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code.name}, message={self.message!r}, "
            f"successfully_synced={self.successfully_synced}, attribute_errors={self.attribute_errors})"
        )


class NetworkError(PurchasesError):
    """The request never produced a backend response."""

    default_code = ErrorCode.NETWORK_ERROR

    def __init__(self, underlying_error: BaseException) -> None:
        super().__init__(
            f"Error performing request: {underlying_error}",
            underlying_error=underlying_error,
            successfully_synced=False,
        )


class BackendError(PurchasesError):
    """The backend answered with an error status."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
        underlying_error: Optional[BaseException] = None,
        successfully_synced: bool = False,
        attribute_errors: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            underlying_error=underlying_error,
            successfully_synced=successfully_synced,
            attribute_errors=attribute_errors,
        )
        self.status_code = status_code


class UnknownBackendError(BackendError):
    default_code = ErrorCode.UNKNOWN_BACKEND_ERROR


class AttributeValidationError(BackendError):
    """One or more subscriber attributes were rejected.

    May accompany an otherwise successful sync, in which case
    ``successfully_synced`` is True.
    """

    default_code = ErrorCode.INVALID_SUBSCRIBER_ATTRIBUTES_ERROR


class ResponseParsingError(PurchasesError):
    """A response body did not have the expected structure."""

    default_code = ErrorCode.UNEXPECTED_BACKEND_RESPONSE_ERROR

    def __init__(
        self,
        sub_code: UnexpectedBackendResponseSubErrorCode,
        underlying_error: Optional[BaseException] = None,
    ) -> None:
        detail = f": {underlying_error}" if underlying_error is not None else ""
        super().__init__(
            f"Unexpected backend response ({sub_code.name}){detail}",
            underlying_error=underlying_error,
        )
        self.sub_code = sub_code


def error_chain(error: BaseException) -> list[BaseException]:
    """Return ``error`` followed by each ``underlying_error`` below it."""
    chain = [error]
    current: Optional[BaseException] = getattr(error, "underlying_error", None) or error.__cause__
    while current is not None and current not in chain:
        chain.append(current)
        current = getattr(current, "underlying_error", None) or current.__cause__
    return chain
