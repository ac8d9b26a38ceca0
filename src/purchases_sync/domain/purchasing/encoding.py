"""Wire encoding of product data for the receipts endpoint.

Prices stay ``Decimal`` in the returned mapping; the JSON codec writes them as
exact numbers.
"""

from __future__ import annotations

from typing import Any

from purchases_sync.domain.purchasing.models import Discount, ProductRequestData


def discount_to_dict(discount: Discount) -> dict[str, Any]:
    return {
        "offer_identifier": discount.offer_identifier,
        "price": discount.price,
        "payment_mode": discount.payment_mode.value,
    }


def product_request_data_to_dict(data: ProductRequestData) -> dict[str, Any]:
    """Build the product section of a ``POST /v1/receipts`` body.

    The intro duration and its type are written as a pair: an intro offer of
    unknown type is dropped entirely rather than defaulted.
    """
    body: dict[str, Any] = {
        "product_id": data.product_identifier,
        "price": data.price,
    }
    if data.currency_code is not None:
        body["currency"] = data.currency_code
    if data.payment_mode is not None:
        body["payment_mode"] = data.payment_mode.value
    if data.intro_price is not None:
        body["introductory_price"] = data.intro_price
    if data.normal_duration is not None:
        body["normal_duration"] = data.normal_duration
    if data.intro_duration is not None and data.intro_duration_type is not None:
        body["intro_duration"] = data.intro_duration
        body["intro_duration_type"] = data.intro_duration_type.value
    if data.subscription_group is not None:
        body["subscription_group_id"] = data.subscription_group
    if data.discounts:
        body["offers"] = [discount_to_dict(discount) for discount in data.discounts]
    return body
