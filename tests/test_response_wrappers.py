import logging
from decimal import Decimal

import pytest

from src.integrations.contracts.errors import NotFoundError, UpstreamError
from src.integrations.policy.response_wrappers import (
    normalize_get_items_response,
    normalize_search_items_response,
    parse_price,
)


def _item(**overrides):
    item = {
        "ASIN": "B000000000",
        "DetailPageURL": "https://www.amazon.com/dp/B000000000",
        "ItemInfo": {"Title": {"DisplayValue": "  Steel Bottle  "}},
    }
    item.update(overrides)
    return item


def _lookup(*items):
    return {"ItemsResult": {"Items": list(items)}}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("19.99", Decimal("19.99")),
        (19.99, Decimal("19.99")),
        (0, Decimal("0")),
        (None, None),
        (True, None),
        ("abc", None),
        ("NaN", None),
        ("Infinity", None),
        (-1, None),
    ],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


def test_record_without_offers_or_images():
    [record] = normalize_get_items_response(_lookup(_item()))
    assert record.title == "Steel Bottle"
    assert record.current_price is None
    assert record.original_price is None
    assert record.image_url is None
    assert record.coupon_detected is False


def test_malformed_optional_branches_become_none(caplog):
    raw = _lookup(_item(Offers="broken", Images=["nope"]))

    with caplog.at_level(logging.WARNING):
        [record] = normalize_get_items_response(raw)

    assert record.current_price is None
    assert record.image_url is None
    assert "Dropping malformed" in caplog.text


def test_malformed_first_listing_does_not_promote_second():
    raw = _lookup(_item(Offers={"Listings": ["garbage", {"Price": {"Amount": "5.00"}}]}))
    [record] = normalize_get_items_response(raw)
    assert record.current_price is None


def test_non_numeric_price_is_dropped():
    raw = _lookup(_item(Offers={"Listings": [{"Price": {"Amount": "abc"}, "SavingBasis": {"Amount": "9.99"}}]}))
    [record] = normalize_get_items_response(raw)
    assert record.current_price is None
    assert record.original_price == Decimal("9.99")


def test_coupon_detected_from_promotions():
    with_coupon = _item(Offers={"Listings": [{"Price": {"Amount": 1}, "Promotions": [{"Type": "Coupon"}]}]})
    without = _item(Offers={"Listings": [{"Price": {"Amount": 1}, "Promotions": []}]})

    assert normalize_get_items_response(_lookup(with_coupon))[0].coupon_detected is True
    assert normalize_get_items_response(_lookup(without))[0].coupon_detected is False


def test_image_preference_medium_then_large_then_small():
    both = _item(Images={"Primary": {"Large": {"URL": "large.jpg"}, "Medium": {"URL": "medium.jpg"}}})
    large_only = _item(Images={"Primary": {"Small": {"URL": "small.jpg"}, "Large": {"URL": "large.jpg"}}})

    assert normalize_get_items_response(_lookup(both))[0].image_url == "medium.jpg"
    assert normalize_get_items_response(_lookup(large_only))[0].image_url == "large.jpg"


def test_missing_detail_url_falls_back_to_marketplace_link():
    raw = _lookup(_item(DetailPageURL=None))
    [record] = normalize_get_items_response(raw, marketplace="www.amazon.co.uk")
    assert record.url == "https://www.amazon.co.uk/dp/B000000000"


def test_lowercase_asin_is_uppercased():
    [record] = normalize_get_items_response(_lookup(_item(ASIN="b000000000")))
    assert record.asin == "B000000000"


@pytest.mark.parametrize(
    "item",
    [
        _item(ASIN=None),
        _item(ASIN="SHORT"),
        _item(ItemInfo={}),
        _item(ItemInfo={"Title": {"DisplayValue": "   "}}),
        "not-an-object",
    ],
)
def test_item_without_identity_is_upstream_error(item):
    with pytest.raises(UpstreamError):
        normalize_get_items_response(_lookup(item))


@pytest.mark.parametrize("raw", [[], "text", {"ItemsResult": "oops"}, {}])
def test_malformed_envelope_is_upstream_error(raw):
    with pytest.raises(UpstreamError):
        normalize_get_items_response(raw)


def test_empty_items_is_not_found():
    with pytest.raises(NotFoundError):
        normalize_get_items_response({"ItemsResult": {}}, requested=["B000000000"])


def test_partial_lookup_logs_missing(caplog):
    with caplog.at_level(logging.INFO):
        records = normalize_get_items_response(_lookup(_item()), requested=["B000000000", "B000000001"])

    assert [r.asin for r in records] == ["B000000000"]
    assert "B000000001" in caplog.text


def test_search_total_defaults_to_item_count():
    page = normalize_search_items_response({"SearchResult": {"Items": [_item()]}}, page=1)
    assert page.total_result_count == 1
    assert page.total_pages == 1
    assert page.items[0].title == "Steel Bottle"


def test_search_without_items_is_not_found():
    with pytest.raises(NotFoundError):
        normalize_search_items_response({"SearchResult": {"Items": [], "TotalResultCount": 0}})


def test_search_errors_only_body_is_classified():
    with pytest.raises(NotFoundError):
        normalize_search_items_response({"Errors": [{"Code": "NoResults", "Message": "none"}]})
