from purchases_sync.domain.subscriber_attributes.models import (
    ReservedSubscriberAttribute,
    SubscriberAttribute,
    attributes_to_backend_dict,
)

__all__ = [
    "ReservedSubscriberAttribute",
    "SubscriberAttribute",
    "attributes_to_backend_dict",
]
