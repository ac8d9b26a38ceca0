from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence


class PaymentMode(str, Enum):
    """How an introductory or promotional offer is paid for."""

    NONE = "none"
    PAY_AS_YOU_GO = "pay_as_you_go"
    PAY_UP_FRONT = "pay_up_front"
    FREE_TRIAL = "free_trial"


class IntroDurationType(str, Enum):
    FREE_TRIAL = "free_trial"
    PAY_UP_FRONT = "pay_up_front"


class PeriodUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class DiscountType(str, Enum):
    PROMOTIONAL = "promotional"
    OTHER = "other"


def coerce_decimal(value: Any) -> Decimal:
    """Convert a price into an exact ``Decimal``.

    Floats go through ``str`` so ``49.99`` becomes ``Decimal("49.99")`` and not
    its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("price must be a number, not bool")
    if isinstance(value, (int, float, str)):
        return Decimal(str(value))
    raise TypeError(f"Unsupported price type: {type(value).__name__}")


@dataclass(frozen=True)
class SubscriptionPeriod:
    value: int
    unit: PeriodUnit

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Subscription period value must be non-negative, got {self.value}")


@dataclass(frozen=True)
class Discount:
    """A promotional offer attached to a subscription product."""

    offer_identifier: Optional[str]
    currency_code: Optional[str]
    price: Decimal
    localized_price_string: str
    payment_mode: PaymentMode
    subscription_period: SubscriptionPeriod
    number_of_periods: int
    type: DiscountType = DiscountType.PROMOTIONAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", coerce_decimal(self.price))


@dataclass(frozen=True)
class ProductRequestData:
    """Everything the backend needs to know about a purchased product.

    Built once per product lookup from store metadata and passed by value into
    request construction.
    """

    product_identifier: str
    currency_code: Optional[str]
    price: Decimal
    payment_mode: Optional[PaymentMode] = None
    normal_duration: Optional[str] = None  # ISO-8601 period, e.g. "P1M"
    intro_duration: Optional[str] = None
    intro_duration_type: Optional[IntroDurationType] = None
    intro_price: Optional[Decimal] = None
    subscription_group: Optional[str] = None
    subscription_period: Optional[SubscriptionPeriod] = None
    discounts: Sequence[Discount] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", coerce_decimal(self.price))
        if self.intro_price is not None:
            object.__setattr__(self, "intro_price", coerce_decimal(self.intro_price))
        object.__setattr__(self, "discounts", tuple(self.discounts))

    @property
    def cache_key(self) -> str:
        from purchases_sync.domain.purchasing.cache_key import cache_key

        return cache_key(self)

    def as_dict(self) -> dict[str, Any]:
        from purchases_sync.domain.purchasing.encoding import product_request_data_to_dict

        return product_request_data_to_dict(self)
