from __future__ import annotations

import pytest

from mock_http import REFERENCE_DATE, FixedDateProvider, MockHTTPClient
from purchases_sync.application.backend import Backend
from purchases_sync.domain.subscriber_attributes.models import SubscriberAttribute


@pytest.fixture
def http_client() -> MockHTTPClient:
    return MockHTTPClient()


@pytest.fixture
def backend(http_client: MockHTTPClient) -> Backend:
    return Backend(http_client)


@pytest.fixture
def date_provider() -> FixedDateProvider:
    return FixedDateProvider(REFERENCE_DATE)


@pytest.fixture
def subscriber_attributes(date_provider: FixedDateProvider) -> dict[str, SubscriberAttribute]:
    attribute1 = SubscriberAttribute.create("a key", "a value", date_provider)
    attribute2 = SubscriberAttribute.create("another key", "another value", date_provider)
    return {attribute1.key: attribute1, attribute2.key: attribute2}
