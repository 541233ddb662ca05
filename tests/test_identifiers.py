import pytest

from src.integrations.contracts.errors import ValidationError
from src.utils.identifiers import (
    add_affiliate_tag,
    extract_identifier,
    is_valid_identifier,
    normalize_identifier,
    resolve_identifier,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/dp/B000000000", "B000000000"),
        ("https://www.amazon.com/dp/B08N5WRWNW", "B08N5WRWNW"),
        ("https://www.amazon.com/Echo-Dot/dp/B08N5WRWNW/ref=sr_1_1?keywords=echo", "B08N5WRWNW"),
        ("https://www.amazon.com/gp/product/b08n5wrwnw?psc=1", "B08N5WRWNW"),
        ("https://www.amazon.in/some-slug/product/B07FZ8S74R", "B07FZ8S74R"),
        ("https://www.amazon.com/Water-Bottle/B01DJGLYZQ/ref=x", "B01DJGLYZQ"),
        ("https://www.amazon.com/dp/B08N5WRWNW#reviews", "B08N5WRWNW"),
    ],
)
def test_extract_identifier_from_known_link_shapes(url, expected):
    assert extract_identifier(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://example.com/not-a-product-url",
        "https://www.amazon.com/s?k=shoes",
        "https://www.amazon.com/dp/B08N5WRWNWX",
    ],
)
def test_extract_identifier_returns_none_when_absent(url):
    assert extract_identifier(url) is None


def test_is_valid_identifier():
    assert is_valid_identifier("B08N5WRWNW")
    assert is_valid_identifier("b08n5wrwnw")
    assert not is_valid_identifier("B08N5WRWN")
    assert not is_valid_identifier("B08N5WRWNW1")
    assert not is_valid_identifier("B08N5-RWNW")
    assert not is_valid_identifier(None)


@pytest.mark.parametrize("candidate", ["B000000000\n", "B000000000 ", "\nB000000000", "B00000000\u212a"])
def test_is_valid_identifier_rejects_trailing_newline_and_non_ascii(candidate):
    assert not is_valid_identifier(candidate)
    with pytest.raises(ValidationError):
        normalize_identifier(candidate)


def test_normalize_identifier_uppercases_and_rejects_garbage():
    assert normalize_identifier("b08n5wrwnw") == "B08N5WRWNW"
    with pytest.raises(ValidationError):
        normalize_identifier("short")


def test_resolve_identifier_accepts_bare_ids_and_urls():
    assert resolve_identifier("  b08n5wrwnw ") == "B08N5WRWNW"
    assert resolve_identifier("https://www.amazon.com/dp/B08N5WRWNW?tag=x-20") == "B08N5WRWNW"


def test_resolve_identifier_rejects_unusable_input():
    with pytest.raises(ValidationError):
        resolve_identifier("not-an-id")
    with pytest.raises(ValidationError):
        resolve_identifier("https://www.amazon.com/s?k=shoes")
    with pytest.raises(ValidationError):
        resolve_identifier("")


def test_add_affiliate_tag_replaces_existing_tag():
    url = add_affiliate_tag("https://www.amazon.com/dp/B08N5WRWNW?tag=old-20&psc=1", "new-20")
    assert url == "https://www.amazon.com/dp/B08N5WRWNW?psc=1&tag=new-20"


def test_add_affiliate_tag_without_query():
    assert add_affiliate_tag("https://www.amazon.com/dp/B08N5WRWNW", "new-20") == (
        "https://www.amazon.com/dp/B08N5WRWNW?tag=new-20"
    )
