"""Pytest fixtures for the product catalog client tests."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from src.integrations.clients.real_http.product_catalog import ProductCatalogClient
from src.integrations.contracts.product_catalog import SigningCredentials

FIXED_MOMENT = datetime(2025, 5, 29, 3, 41, 54, 123000, tzinfo=timezone.utc)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def call_count(self):
        return len(self.requests)

    def last_payload(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def credentials():
    return SigningCredentials(
        access_key="AKIDEXAMPLE",
        secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        partner_tag="test-20",
    )


@pytest.fixture
def make_client(credentials):
    """Build a client whose transport answers with `handler(request)`."""

    def _make(handler):
        transport = RecordingTransport(handler)
        client = ProductCatalogClient(credentials, transport=transport, clock=lambda: FIXED_MOMENT)
        return client, transport

    return _make


@pytest.fixture
def lookup_item():
    return {
        "ASIN": "B000000000",
        "DetailPageURL": "https://www.amazon.com/dp/B000000000?tag=test-20",
        "ItemInfo": {"Title": {"DisplayValue": "Stainless Steel Water Bottle"}},
        "Images": {"Primary": {"Medium": {"URL": "https://m.media-amazon.com/images/I/bottle.jpg"}}},
        "Offers": {
            "Listings": [
                {
                    "Price": {"Amount": "19.99", "Currency": "USD"},
                    "SavingBasis": {"Amount": "29.99", "Currency": "USD"},
                }
            ]
        },
    }
