from __future__ import annotations

import base64
import hashlib
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

from purchases_sync.adapters.http.json_codec import decode_json, encode_json
from purchases_sync.application.error_response import (
    ATTRIBUTE_ERRORS_KEY,
    ErrorResponse,
    parse_attribute_errors,
)
from purchases_sync.application.errors import (
    AttributeValidationError,
    NetworkError,
    PurchasesError,
    ResponseParsingError,
    UnexpectedBackendResponseSubErrorCode,
    UnknownBackendError,
)
from purchases_sync.application.etag_manager import ETagManager
from purchases_sync.application.in_flight import InFlightRequests
from purchases_sync.domain.common.ids import RequestFingerprint
from purchases_sync.domain.customer_info.errors import CustomerInfoError, CustomerInfoErrorCode
from purchases_sync.domain.customer_info.models import CustomerInfo
from purchases_sync.domain.purchasing.models import ProductRequestData
from purchases_sync.domain.subscriber_attributes.models import (
    SubscriberAttribute,
    attributes_to_backend_dict,
)
from purchases_sync.ports.http_client import HTTPClient, HTTPResponse, TransportError

logger = logging.getLogger(__name__)

RECEIPTS_PATH = "/v1/receipts"


def subscriber_path(app_user_id: str) -> str:
    return f"/v1/subscribers/{quote(app_user_id, safe='')}"


def subscriber_attributes_path(app_user_id: str) -> str:
    return f"{subscriber_path(app_user_id)}/attributes"


class Backend:
    """Single point through which subscriber state is sent to and read from the backend.

    Every public coroutine resolves exactly once: with a value, or by raising a
    ``PurchasesError`` subclass. No request is retried here.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        etag_manager: Optional[ETagManager] = None,
        in_flight: Optional[InFlightRequests] = None,
    ) -> None:
        self.http_client = http_client
        self.etag_manager = etag_manager or ETagManager()
        self.in_flight = in_flight or InFlightRequests()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # Receipts

    async def post_receipt(
        self,
        receipt_data: bytes,
        app_user_id: str,
        is_restore: bool,
        product_data: Optional[ProductRequestData] = None,
        presented_offering_identifier: Optional[str] = None,
        observer_mode: bool = False,
        subscriber_attributes: Optional[Mapping[str, SubscriberAttribute]] = None,
    ) -> CustomerInfo:
        """Post a receipt and return the refreshed customer info.

        Concurrent calls with the same app user id, restore flag, receipt and
        product cache key share a single network call and all receive its
        outcome.

        Raises:
            AttributeValidationError: the receipt was synced but some attributes
                were rejected (``successfully_synced`` is True).
            UnknownBackendError: the backend failed, or answered 2xx with a body
                that is not customer info.
            NetworkError: no response was received.
        """
        fingerprint = RequestFingerprint.from_parts(
            app_user_id,
            is_restore,
            hashlib.sha1(receipt_data).hexdigest(),
            product_data.cache_key if product_data else "",
        )

        async def operation() -> CustomerInfo:
            return await self._post_receipt(
                receipt_data,
                app_user_id,
                is_restore,
                product_data,
                presented_offering_identifier,
                observer_mode,
                subscriber_attributes,
            )

        return await self.in_flight.run(fingerprint, operation)

    async def _post_receipt(
        self,
        receipt_data: bytes,
        app_user_id: str,
        is_restore: bool,
        product_data: Optional[ProductRequestData],
        presented_offering_identifier: Optional[str],
        observer_mode: bool,
        subscriber_attributes: Optional[Mapping[str, SubscriberAttribute]],
    ) -> CustomerInfo:
        body: dict[str, Any] = {
            "fetch_token": base64.b64encode(receipt_data).decode("ascii"),
            "app_user_id": app_user_id,
            "is_restore": is_restore,
            "observer_mode": observer_mode,
        }
        if product_data is not None:
            body.update(product_data.as_dict())
        if presented_offering_identifier is not None:
            body["presented_offering_identifier"] = presented_offering_identifier
        if subscriber_attributes:
            body["attributes"] = attributes_to_backend_dict(subscriber_attributes)

        logger.info(
            f"Posting receipt (restore={is_restore}, observer_mode={observer_mode})",
            extra={"app_user_id": app_user_id},
        )
        response = await self._perform("POST", RECEIPTS_PATH, body)
        try:
            customer_info = self._customer_info_from(response)
        except PurchasesError as e:
            if e.successfully_synced:
                self._mark_synced(subscriber_attributes)
            raise
        self._mark_synced(subscriber_attributes)
        return customer_info

    # Subscriber attributes

    async def post_subscriber_attributes(
        self,
        attributes: Mapping[str, SubscriberAttribute],
        app_user_id: str,
    ) -> None:
        """Post subscriber attributes; an empty map returns without a network call.

        Attributes are marked synced whenever the backend reports the request
        as received, including when it rejected some of them.
        """
        if not attributes:
            logger.debug("No subscriber attributes to post", extra={"app_user_id": app_user_id})
            return None

        path = subscriber_attributes_path(app_user_id)
        logger.info(f"Posting {len(attributes)} subscriber attributes", extra={"app_user_id": app_user_id})
        response = await self._perform("POST", path, {"attributes": attributes_to_backend_dict(attributes)})
        try:
            self._check_attributes_response(response)
        except PurchasesError as e:
            if e.successfully_synced:
                self._mark_synced(attributes)
            raise
        self._mark_synced(attributes)
        return None

    def _check_attributes_response(self, response: HTTPResponse) -> None:
        if not response.is_success:
            raise ErrorResponse.from_body(response.body).as_backend_error(response.status_code)
        if not response.body:
            return
        try:
            data = decode_json(response.body)
        except ValueError as e:
            raise UnknownBackendError(
                "Could not parse subscriber attributes response",
                status_code=response.status_code,
                underlying_error=ResponseParsingError(
                    UnexpectedBackendResponseSubErrorCode.POST_ATTRIBUTES_RESPONSE_PARSING, e
                ),
                successfully_synced=True,
            )
        attribute_errors = parse_attribute_errors(data.get(ATTRIBUTE_ERRORS_KEY)) if isinstance(data, dict) else {}
        if attribute_errors:
            raise AttributeValidationError(
                "Some subscriber attributes were rejected",
                status_code=response.status_code,
                successfully_synced=True,
                attribute_errors=attribute_errors,
            )

    # Customer info

    async def get_customer_info(self, app_user_id: str, refresh: bool = False) -> CustomerInfo:
        """Fetch customer info; concurrent fetches for one user share a network call."""
        fingerprint = RequestFingerprint.from_parts("GET", subscriber_path(app_user_id), refresh)

        async def operation() -> CustomerInfo:
            response = await self._perform("GET", subscriber_path(app_user_id), refresh=refresh)
            return self._customer_info_from(response)

        return await self.in_flight.run(fingerprint, operation)

    # Shared plumbing

    async def _perform(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        refresh: bool = False,
    ) -> HTTPResponse:
        encoded = encode_json(body) if body is not None else None
        use_etag = method == "GET"
        headers = self.etag_manager.request_headers(path, refresh=refresh) if use_etag else {}
        try:
            response = await self.http_client.request(method, path, encoded, headers)
            if use_etag:
                resolved = self.etag_manager.resolve(path, response)
                if resolved is None:
                    # 304 without a cached body: ask again without an ETag
                    response = await self.http_client.request(
                        method, path, encoded, self.etag_manager.request_headers(path, refresh=True)
                    )
                    resolved = self.etag_manager.resolve(path, response)
                    if resolved is None:
                        raise UnknownBackendError(
                            "Backend answered 304 to a request sent without an ETag",
                            status_code=response.status_code,
                            successfully_synced=False,
                        )
                response = resolved
        except TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError(e) from e
        logger.debug(f"{method} {path} -> {response.status_code}")
        return response

    def _customer_info_from(self, response: HTTPResponse) -> CustomerInfo:
        if not response.is_success:
            raise ErrorResponse.from_body(response.body).as_backend_error(response.status_code)

        try:
            data = decode_json(response.body) if response.body else None
        except ValueError as e:
            data = None
            parsing_error = CustomerInfoError(CustomerInfoErrorCode.INVALID_JSON, f"Response is not valid JSON: {e}")
        else:
            parsing_error = None

        customer_info: Optional[CustomerInfo] = None
        if parsing_error is None:
            try:
                customer_info = CustomerInfo.from_response(data)
            except CustomerInfoError as e:
                parsing_error = e

        if customer_info is None:
            raise UnknownBackendError(
                "Could not parse customer info from backend response",
                status_code=response.status_code,
                underlying_error=ResponseParsingError(
                    UnexpectedBackendResponseSubErrorCode.CUSTOMER_INFO_RESPONSE_PARSING, parsing_error
                ),
                successfully_synced=False,
            )

        attribute_errors = parse_attribute_errors(data.get(ATTRIBUTE_ERRORS_KEY))
        if attribute_errors:
            logger.warning(f"Backend rejected subscriber attributes: {sorted(attribute_errors)}")
            raise AttributeValidationError(
                "Receipt synced but some subscriber attributes were rejected",
                status_code=response.status_code,
                successfully_synced=True,
                attribute_errors=attribute_errors,
            )
        return customer_info

    def _mark_synced(self, attributes: Optional[Mapping[str, SubscriberAttribute]]) -> None:
        for attribute in (attributes or {}).values():
            attribute.mark_synced()
