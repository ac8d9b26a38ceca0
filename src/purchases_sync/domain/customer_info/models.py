"""Pydantic models for the subscriber (customer info) payload."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from purchases_sync.domain.customer_info.errors import CustomerInfoError, CustomerInfoErrorCode


class SubscriptionInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    expires_date: Optional[datetime] = Field(None, description="Null for lifetime purchases")
    purchase_date: Optional[datetime] = None
    original_purchase_date: Optional[datetime] = None
    period_type: Optional[str] = Field(None, description="normal | trial | intro")
    store: Optional[str] = None
    is_sandbox: bool = False
    unsubscribe_detected_at: Optional[datetime] = None
    billing_issues_detected_at: Optional[datetime] = None


class EntitlementInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    expires_date: Optional[datetime] = None
    product_identifier: Optional[str] = None
    purchase_date: Optional[datetime] = None


class NonSubscriptionTransaction(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    purchase_date: Optional[datetime] = None
    store: Optional[str] = None


class SubscriberInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    first_seen: datetime
    original_app_user_id: str
    original_application_version: Optional[str] = None
    management_url: Optional[str] = None
    subscriptions: dict[str, SubscriptionInfo] = Field(default_factory=dict)
    entitlements: dict[str, EntitlementInfo] = Field(default_factory=dict)
    non_subscriptions: dict[str, list[NonSubscriptionTransaction]] = Field(default_factory=dict)


class CustomerInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    request_date: datetime
    subscriber: SubscriberInfo

    @classmethod
    def from_response(cls, data: Any) -> "CustomerInfo":
        """Validate a decoded response body, raising ``CustomerInfoError`` on bad shape."""
        if not isinstance(data, dict) or not isinstance(data.get("subscriber"), dict):
            raise CustomerInfoError(
                CustomerInfoErrorCode.MISSING_JSON_OBJECT,
                "Response does not contain a 'subscriber' JSON object",
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CustomerInfoError(CustomerInfoErrorCode.INVALID_JSON, f"Invalid customer info: {e}") from e

    def expiration_date_for(self, product_identifier: str) -> Optional[datetime]:
        subscription = self.subscriber.subscriptions.get(product_identifier)
        return subscription.expires_date if subscription else None

    def active_subscriptions(self, at: Optional[datetime] = None) -> set[str]:
        """Product identifiers whose subscription has not expired at ``at`` (default: request date)."""
        reference = at or self.request_date
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        active = set()
        for product_identifier, subscription in self.subscriber.subscriptions.items():
            expires = subscription.expires_date
            if expires is None:
                active.add(product_identifier)
                continue
            if expires.tzinfo is None:
                expires = expires.replace(tzinfo=timezone.utc)
            if expires > reference:
                active.add(product_identifier)
        return active
