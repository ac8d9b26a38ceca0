"""Unit tests for ProductRequestData wire encoding."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

import pytest

from purchases_sync.adapters.http.json_codec import decode_json, encode_json
from purchases_sync.domain.purchasing.encoding import product_request_data_to_dict
from purchases_sync.domain.purchasing.models import (
    Discount,
    DiscountType,
    IntroDurationType,
    PaymentMode,
    PeriodUnit,
    ProductRequestData,
    SubscriptionPeriod,
)


def make_product(
    product_identifier: str = "cool_product",
    payment_mode: Optional[PaymentMode] = None,
    currency_code: str = "UYU",
    price: Decimal = Decimal("15.99"),
    normal_duration: Optional[str] = None,
    intro_duration: Optional[str] = None,
    intro_duration_type: Optional[IntroDurationType] = None,
    intro_price: Optional[Decimal] = None,
    subscription_group: Optional[str] = None,
    subscription_period: Optional[SubscriptionPeriod] = None,
    discounts: Sequence[Discount] = (),
) -> ProductRequestData:
    return ProductRequestData(
        product_identifier=product_identifier,
        payment_mode=payment_mode,
        currency_code=currency_code,
        price=price,
        normal_duration=normal_duration,
        intro_duration=intro_duration,
        intro_duration_type=intro_duration_type,
        intro_price=intro_price,
        subscription_group=subscription_group,
        subscription_period=subscription_period,
        discounts=discounts,
    )


def make_discount(
    offer_identifier: str,
    price: Decimal,
    payment_mode: PaymentMode,
    period: SubscriptionPeriod,
    number_of_periods: int,
) -> Discount:
    return Discount(
        offer_identifier=offer_identifier,
        currency_code="USD",
        price=price,
        localized_price_string=f"${price}",
        payment_mode=payment_mode,
        subscription_period=period,
        number_of_periods=number_of_periods,
        type=DiscountType.PROMOTIONAL,
    )


def test_as_dict_converts_product_identifier():
    body = product_request_data_to_dict(make_product(product_identifier="cool_product"))
    assert body["product_id"] == "cool_product"


def test_as_dict_omits_payment_mode_when_unset():
    body = product_request_data_to_dict(make_product(payment_mode=None))
    assert "payment_mode" not in body


@pytest.mark.parametrize(
    "payment_mode, expected",
    [
        (PaymentMode.NONE, "none"),
        (PaymentMode.PAY_AS_YOU_GO, "pay_as_you_go"),
        (PaymentMode.PAY_UP_FRONT, "pay_up_front"),
        (PaymentMode.FREE_TRIAL, "free_trial"),
    ],
)
def test_as_dict_converts_payment_mode(payment_mode, expected):
    body = product_request_data_to_dict(make_product(payment_mode=payment_mode))
    assert body["payment_mode"] == expected


def test_as_dict_converts_currency_code():
    body = product_request_data_to_dict(make_product(currency_code="USD"))
    assert body["currency"] == "USD"


def test_as_dict_keeps_price_exact():
    body = product_request_data_to_dict(make_product(price=Decimal("9.99")))
    assert body["price"] == Decimal("9.99")
    assert isinstance(body["price"], Decimal)


def test_float_price_is_coerced_without_binary_drift():
    product = make_product(price=9.99)  # type: ignore[arg-type]
    assert product.price == Decimal("9.99")


def test_as_dict_converts_normal_duration():
    body = product_request_data_to_dict(make_product(normal_duration="P3Y"))
    assert body["normal_duration"] == "P3Y"


def test_as_dict_converts_intro_duration_for_free_trial():
    body = product_request_data_to_dict(
        make_product(intro_duration="P3M", intro_duration_type=IntroDurationType.FREE_TRIAL)
    )
    assert body["intro_duration"] == "P3M"
    assert body["intro_duration_type"] == "free_trial"


def test_as_dict_converts_intro_duration_for_intro_price():
    body = product_request_data_to_dict(
        make_product(intro_duration="P3M", intro_duration_type=IntroDurationType.PAY_UP_FRONT)
    )
    assert body["intro_duration"] == "P3M"
    assert body["intro_duration_type"] == "pay_up_front"


def test_as_dict_doesnt_add_intro_duration_if_duration_type_unknown():
    """Test that an intro offer of unknown type is dropped as a pair."""
    body = product_request_data_to_dict(make_product(intro_duration="P3M", intro_duration_type=None))
    assert "intro_duration" not in body
    assert "intro_duration_type" not in body


def test_as_dict_converts_intro_price():
    body = product_request_data_to_dict(make_product(intro_price=Decimal("6.99")))
    assert body["introductory_price"] == Decimal("6.99")


def test_as_dict_converts_subscription_group():
    body = product_request_data_to_dict(make_product(subscription_group="cool_group"))
    assert body["subscription_group_id"] == "cool_group"


def test_as_dict_converts_discounts_in_order():
    discounts = [
        make_discount("offerid1", Decimal("11.1"), PaymentMode.PAY_AS_YOU_GO, SubscriptionPeriod(1, PeriodUnit.MONTH), 1),
        make_discount("offerid2", Decimal("12.2"), PaymentMode.PAY_UP_FRONT, SubscriptionPeriod(5, PeriodUnit.WEEK), 2),
        make_discount("offerid3", Decimal("13.3"), PaymentMode.FREE_TRIAL, SubscriptionPeriod(3, PeriodUnit.MONTH), 3),
    ]
    body = product_request_data_to_dict(make_product(discounts=discounts))

    assert body["offers"] == [
        {"offer_identifier": "offerid1", "price": Decimal("11.1"), "payment_mode": "pay_as_you_go"},
        {"offer_identifier": "offerid2", "price": Decimal("12.2"), "payment_mode": "pay_up_front"},
        {"offer_identifier": "offerid3", "price": Decimal("13.3"), "payment_mode": "free_trial"},
    ]


def test_as_dict_omits_optional_fields_when_absent():
    body = product_request_data_to_dict(make_product())
    assert set(body) == {"product_id", "price", "currency"}


def test_encoding_writes_exact_decimal_numbers():
    discounts = [
        make_discount("offerid1", Decimal("11.2"), PaymentMode.PAY_AS_YOU_GO, SubscriptionPeriod(1, PeriodUnit.MONTH), 1),
    ]
    product = make_product(
        payment_mode=PaymentMode.PAY_UP_FRONT,
        price=Decimal("49.99"),
        normal_duration="P3Y",
        intro_duration="P3W",
        intro_duration_type=IntroDurationType.FREE_TRIAL,
        intro_price=Decimal("15.13"),
        subscription_group="cool_group",
        discounts=discounts,
    )

    encoded = encode_json(product.as_dict())

    assert b'"price":49.99' in encoded
    assert b'"introductory_price":15.13' in encoded
    decoded = decode_json(encoded)
    assert decoded["price"] == Decimal("49.99")
    assert decoded["offers"][0]["price"] == Decimal("11.2")


def test_product_request_data_is_immutable():
    product = make_product()
    with pytest.raises(AttributeError):
        product.price = Decimal("1.00")  # type: ignore[misc]


def test_negative_subscription_period_is_rejected():
    with pytest.raises(ValueError):
        SubscriptionPeriod(-1, PeriodUnit.DAY)
