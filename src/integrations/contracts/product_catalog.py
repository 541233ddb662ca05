from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

"""
Product catalog contracts.

Defines the shapes the catalog client hands back to callers:
- ProductRecord for item lookups (GetItems)
- SearchResultRecord / SearchPage for keyword search (SearchItems)
- SigningCredentials, the immutable identity used to sign every request

These contracts are used by both:
- clients/real_http/product_catalog.py (signed PA-API calls)
- clients/mocks/product_catalog.py (in-memory data for development/tests)
"""

DEFAULT_SERVICE = "ProductAdvertisingAPI"
SEARCH_PAGE_SIZE = 10


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SigningCredentials:
    access_key: str
    secret_key: str
    partner_tag: str
    region: str = "us-east-1"
    service: str = DEFAULT_SERVICE

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("access_key", "secret_key", "partner_tag", "region", "service")
            if not str(getattr(self, name) or "").strip()
        ]

    def __repr__(self) -> str:
        # Never render the secret.
        return (
            f"SigningCredentials(access_key={self.access_key[:4]!r}..., partner_tag={self.partner_tag!r}, "
            f"region={self.region!r}, service={self.service!r})"
        )


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductRecord:
    asin: str
    title: str
    url: str                                  # detail page URL
    current_price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None  # "savings basis" / list price
    image_url: Optional[str] = None
    coupon_detected: bool = False

    @property
    def discount_percent(self) -> Optional[Decimal]:
        if self.current_price is None or not self.original_price:
            return None
        if self.original_price <= self.current_price:
            return Decimal("0")
        drop = (self.original_price - self.current_price) / self.original_price * 100
        return drop.quantize(Decimal("0.01"))


@dataclass(frozen=True)
class SearchResultRecord:
    asin: str
    title: str
    url: str
    price: Optional[Decimal] = None
    image_url: Optional[str] = None
    coupon_detected: bool = False


@dataclass(frozen=True)
class SearchPage:
    items: List[SearchResultRecord] = field(default_factory=list)
    total_result_count: int = 0
    page: int = 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_result_count / SEARCH_PAGE_SIZE) if self.total_result_count > 0 else 0
