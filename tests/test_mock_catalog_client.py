from decimal import Decimal

import pytest

from src.integrations.clients.mocks.product_catalog import MockProductCatalogClient
from src.integrations.contracts.errors import NotFoundError, ValidationError
from src.utils.config_loader import CatalogEndpointConfig


@pytest.mark.asyncio
async def test_mock_lookup_returns_known_items():
    client = MockProductCatalogClient()

    [record] = await client.get_items(["B08N5WRWNW"])

    assert record.title.startswith("Echo Dot")
    assert record.current_price == Decimal("29.99")
    assert record.original_price == Decimal("49.99")
    assert record.discount_percent == Decimal("40.01")
    assert record.coupon_detected is True


@pytest.mark.asyncio
async def test_mock_lookup_skips_unknown_items():
    client = MockProductCatalogClient()

    records = await client.get_items(["B08N5WRWNW", "B000000000"])

    assert [r.asin for r in records] == ["B08N5WRWNW"]


@pytest.mark.asyncio
async def test_mock_lookup_unknown_only_is_not_found():
    client = MockProductCatalogClient()

    with pytest.raises(NotFoundError) as excinfo:
        await client.get_items(["B000000000"])

    assert excinfo.value.code == "ItemNotAccessible"


@pytest.mark.asyncio
async def test_mock_requests_are_signed():
    client = MockProductCatalogClient()

    await client.get_item("https://www.amazon.com/dp/B01DJGLYZQ")

    assert len(client.requests) == 1
    assert client.requests[0].headers["authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKIDMOCKCATALOG/")


@pytest.mark.asyncio
async def test_mock_item_without_offers_has_no_price():
    client = MockProductCatalogClient()

    record = await client.get_item("B01DJGLYZQ")

    assert record.current_price is None
    assert record.image_url is None


@pytest.mark.asyncio
async def test_mock_search_matches_titles_and_pages():
    items = [
        {"ASIN": f"B0000000{i:02d}", "ItemInfo": {"Title": {"DisplayValue": f"USB Cable {i}"}}}
        for i in range(12)
    ]
    client = MockProductCatalogClient(items=items)

    page = await client.search_items("usb cable", item_count=5, item_page=3)

    assert page.total_result_count == 12
    assert page.total_pages == 2
    assert [item.asin for item in page.items] == ["B000000010", "B000000011"]
    assert page.items[0].url == "https://www.amazon.com/dp/B000000010"


@pytest.mark.asyncio
async def test_mock_search_without_match_is_not_found():
    client = MockProductCatalogClient()

    with pytest.raises(NotFoundError):
        await client.search_items("no such product")


@pytest.mark.asyncio
async def test_mock_validation_happens_before_transport():
    client = MockProductCatalogClient()

    with pytest.raises(ValidationError):
        await client.search_items("ab")

    assert client.requests == []


@pytest.mark.asyncio
async def test_mock_signs_with_region_of_configured_locale():
    client = MockProductCatalogClient(config=CatalogEndpointConfig(locale="de"))

    record = await client.get_item("B07FZ8S74R")

    assert record.asin == "B07FZ8S74R"
    assert client.credentials.region == "eu-west-1"
    assert str(client.requests[0].url) == "https://webservices.amazon.de/paapi5/getitems"
    assert "/eu-west-1/ProductAdvertisingAPI/aws4_request" in client.requests[0].headers["authorization"]
