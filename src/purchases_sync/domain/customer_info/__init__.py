from purchases_sync.domain.customer_info.errors import CustomerInfoError, CustomerInfoErrorCode
from purchases_sync.domain.customer_info.models import CustomerInfo, SubscriberInfo, SubscriptionInfo

__all__ = [
    "CustomerInfo",
    "CustomerInfoError",
    "CustomerInfoErrorCode",
    "SubscriberInfo",
    "SubscriptionInfo",
]
