from __future__ import annotations

from decimal import Decimal
from typing import Optional

from purchases_sync.domain.purchasing.models import ProductRequestData

DELIMITER = "-"


def format_price(price: Decimal) -> str:
    """Render a price without trailing zeros or exponent notation."""
    normalized = price.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


def _has_paid_intro(intro_price: Optional[Decimal]) -> str:
    return "1" if intro_price is not None and intro_price != 0 else "0"


def cache_key(data: ProductRequestData) -> str:
    """Derive the de-duplication key for requests bundling ``data``.

    Discount order is significant and is not sorted.
    """
    parts = [
        data.product_identifier,
        format_price(data.price),
        data.currency_code or "",
        str(data.subscription_period.value) if data.subscription_period else "",
        _has_paid_intro(data.intro_price),
        data.subscription_group or "",
        data.normal_duration or "",
        data.intro_duration or "",
        str(len(data.discounts)),
    ]
    parts.extend(discount.offer_identifier or "" for discount in data.discounts)
    return DELIMITER.join(parts)
