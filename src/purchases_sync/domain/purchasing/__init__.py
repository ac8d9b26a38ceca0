"""Product data sent to the backend alongside receipts."""

from purchases_sync.domain.purchasing.cache_key import cache_key
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

__all__ = [
    "Discount",
    "DiscountType",
    "IntroDurationType",
    "PaymentMode",
    "PeriodUnit",
    "ProductRequestData",
    "SubscriptionPeriod",
    "cache_key",
    "product_request_data_to_dict",
]
