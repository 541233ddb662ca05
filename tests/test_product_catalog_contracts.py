from decimal import Decimal

from src.integrations.contracts.product_catalog import ProductRecord, SearchPage, SigningCredentials


def _record(current, original):
    return ProductRecord(asin="B000000000", title="t", url="u", current_price=current, original_price=original)


def test_discount_percent():
    assert _record(Decimal("19.99"), Decimal("29.99")).discount_percent == Decimal("33.34")
    assert _record(Decimal("30"), Decimal("20")).discount_percent == Decimal("0")
    assert _record(None, Decimal("20")).discount_percent is None
    assert _record(Decimal("10"), None).discount_percent is None


def test_total_pages_rounds_up():
    assert SearchPage(total_result_count=0).total_pages == 0
    assert SearchPage(total_result_count=10).total_pages == 1
    assert SearchPage(total_result_count=25).total_pages == 3


def test_credentials_repr_hides_secret():
    creds = SigningCredentials(access_key="AKIDEXAMPLE", secret_key="super-secret", partner_tag="tag-20")
    assert "super-secret" not in repr(creds)
    assert creds.missing_fields() == []
    assert SigningCredentials("", " ", "tag-20").missing_fields() == ["access_key", "secret_key"]
