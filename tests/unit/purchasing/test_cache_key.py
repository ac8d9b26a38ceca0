"""Unit tests for the product cache key."""

from __future__ import annotations

from decimal import Decimal

from purchases_sync.domain.purchasing.cache_key import cache_key, format_price
from purchases_sync.domain.purchasing.models import (
    Discount,
    IntroDurationType,
    PaymentMode,
    PeriodUnit,
    ProductRequestData,
    SubscriptionPeriod,
)


def _discount(offer_identifier: str, price: str = "11.1") -> Discount:
    return Discount(
        offer_identifier=offer_identifier,
        currency_code="USD",
        price=Decimal(price),
        localized_price_string=f"${price}",
        payment_mode=PaymentMode.PAY_AS_YOU_GO,
        subscription_period=SubscriptionPeriod(1, PeriodUnit.MONTH),
        number_of_periods=1,
    )


def _reference_product(**overrides) -> ProductRequestData:
    fields = dict(
        product_identifier="cool_product",
        currency_code="UYU",
        price=Decimal("49.99"),
        payment_mode=PaymentMode.PAY_AS_YOU_GO,
        normal_duration="P3Y",
        intro_duration="P3W",
        intro_duration_type=IntroDurationType.FREE_TRIAL,
        intro_price=Decimal("0"),
        subscription_group="cool_group",
        subscription_period=SubscriptionPeriod(1, PeriodUnit.MONTH),
        discounts=(_discount("offerid1"), _discount("offerid2"), _discount("offerid3")),
    )
    fields.update(overrides)
    return ProductRequestData(**fields)


def test_cache_key_matches_reference_layout():
    assert (
        cache_key(_reference_product())
        == "cool_product-49.99-UYU-1-0-cool_group-P3Y-P3W-3-offerid1-offerid2-offerid3"
    )


def test_cache_key_property_delegates_to_function():
    product = _reference_product()
    assert product.cache_key == cache_key(product)


def test_cache_key_is_deterministic_for_equal_inputs():
    assert cache_key(_reference_product()) == cache_key(_reference_product())


def test_cache_key_depends_on_discount_order():
    """Test that reordering discounts yields a different key."""
    reordered = _reference_product(discounts=(_discount("offerid3"), _discount("offerid1"), _discount("offerid2")))
    assert cache_key(reordered) != cache_key(_reference_product())
    assert cache_key(reordered).endswith("-3-offerid3-offerid1-offerid2")


def test_cache_key_flags_paid_intro():
    assert "-1-1-cool_group-" in cache_key(_reference_product(intro_price=Decimal("0.99")))


def test_cache_key_treats_float_and_decimal_price_alike():
    float_priced = _reference_product(price=49.99)
    assert cache_key(float_priced) == cache_key(_reference_product())


def test_cache_key_ignores_trailing_zeros():
    assert cache_key(_reference_product(price=Decimal("49.990"))) == cache_key(_reference_product())


def test_cache_key_uses_empty_segments_for_absent_fields():
    product = ProductRequestData(product_identifier="bare", currency_code="USD", price=Decimal("1.5"))
    assert cache_key(product) == "bare-1.5-USD--0----0"


def test_format_price_avoids_exponent_notation():
    assert format_price(Decimal("100")) == "100"
    assert format_price(Decimal("0.00")) == "0"
    assert format_price(Decimal("1E+2")) == "100"
