"""
Catalog response normalisation.

PA-API responses are deeply nested and most branches are optional depending on
the requested resources and the item. The schema below is deliberately lenient
for optional branches (absent or malformed -> None, with a warning for the
malformed case) and strict for what a record cannot exist without (identifier,
title, the result container itself).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.integrations.contracts.errors import NotFoundError, UpstreamError
from src.integrations.contracts.product_catalog import ProductRecord, SearchPage, SearchResultRecord
from src.integrations.policy.error_classifier import classify_response
from src.utils.identifiers import is_valid_identifier

logger = logging.getLogger(__name__)


def _object_or_none(value: Any, label: str) -> Any:
    if value is None or isinstance(value, dict):
        return value
    logger.warning("Dropping malformed %s: expected object, got %s", label, type(value).__name__)
    return None


def _list_or_none(value: Any, label: str) -> Any:
    if value is None or isinstance(value, list):
        return value
    logger.warning("Dropping malformed %s: expected list, got %s", label, type(value).__name__)
    return None


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------

class MoneyModel(BaseModel):
    amount: Any = Field(default=None, alias="Amount")
    currency: Any = Field(default=None, alias="Currency")
    display_amount: Any = Field(default=None, alias="DisplayAmount")


class ListingModel(BaseModel):
    price: Optional[MoneyModel] = Field(default=None, alias="Price")
    saving_basis: Optional[MoneyModel] = Field(default=None, alias="SavingBasis")
    promotions: Optional[List[Any]] = Field(default=None, alias="Promotions")

    @field_validator("price", "saving_basis", mode="before")
    @classmethod
    def _objects_only(cls, value: Any, info) -> Any:
        return _object_or_none(value, f"Listing.{info.field_name}")

    @field_validator("promotions", mode="before")
    @classmethod
    def _promotions_list(cls, value: Any) -> Any:
        return _list_or_none(value, "Listing.Promotions")


class OffersModel(BaseModel):
    listings: List[Optional[ListingModel]] = Field(default_factory=list, alias="Listings")

    @field_validator("listings", mode="before")
    @classmethod
    def _listings(cls, value: Any) -> Any:
        value = _list_or_none(value, "Offers.Listings")
        if value is None:
            return []
        # Keep positions: a malformed first listing must not promote the second.
        return [_object_or_none(entry, "Offers.Listings[]") for entry in value]

    @property
    def first_listing(self) -> Optional[ListingModel]:
        return self.listings[0] if self.listings else None


class ImageSizeModel(BaseModel):
    url: Any = Field(default=None, alias="URL")


class ImageSetModel(BaseModel):
    small: Optional[ImageSizeModel] = Field(default=None, alias="Small")
    medium: Optional[ImageSizeModel] = Field(default=None, alias="Medium")
    large: Optional[ImageSizeModel] = Field(default=None, alias="Large")

    @field_validator("small", "medium", "large", mode="before")
    @classmethod
    def _objects_only(cls, value: Any, info) -> Any:
        return _object_or_none(value, f"Images.Primary.{info.field_name}")


class ImagesModel(BaseModel):
    primary: Optional[ImageSetModel] = Field(default=None, alias="Primary")

    @field_validator("primary", mode="before")
    @classmethod
    def _primary(cls, value: Any) -> Any:
        return _object_or_none(value, "Images.Primary")


class DisplayValueModel(BaseModel):
    display_value: Any = Field(default=None, alias="DisplayValue")


class ItemInfoModel(BaseModel):
    title: Optional[DisplayValueModel] = Field(default=None, alias="Title")

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> Any:
        return _object_or_none(value, "ItemInfo.Title")


class ItemModel(BaseModel):
    asin: Any = Field(default=None, alias="ASIN")
    detail_page_url: Any = Field(default=None, alias="DetailPageURL")
    item_info: Optional[ItemInfoModel] = Field(default=None, alias="ItemInfo")
    offers: Optional[OffersModel] = Field(default=None, alias="Offers")
    images: Optional[ImagesModel] = Field(default=None, alias="Images")

    @field_validator("item_info", "offers", "images", mode="before")
    @classmethod
    def _objects_only(cls, value: Any, info) -> Any:
        return _object_or_none(value, f"Item.{info.field_name}")


class RemoteErrorModel(BaseModel):
    code: Any = Field(default=None, alias="Code")
    message: Any = Field(default=None, alias="Message")


class ItemsResultModel(BaseModel):
    items: Optional[List[Any]] = Field(default=None, alias="Items")


class GetItemsEnvelope(BaseModel):
    items_result: Optional[ItemsResultModel] = Field(default=None, alias="ItemsResult")
    errors: List[RemoteErrorModel] = Field(default_factory=list, alias="Errors")


class SearchResultModel(BaseModel):
    items: Optional[List[Any]] = Field(default=None, alias="Items")
    total_result_count: Any = Field(default=None, alias="TotalResultCount")
    search_url: Any = Field(default=None, alias="SearchURL")


class SearchItemsEnvelope(BaseModel):
    search_result: Optional[SearchResultModel] = Field(default=None, alias="SearchResult")
    errors: List[RemoteErrorModel] = Field(default_factory=list, alias="Errors")


# ---------------------------------------------------------------------------
# Public normalisers
# ---------------------------------------------------------------------------

def normalize_get_items_response(
    raw: Any,
    *,
    requested: Sequence[str] = (),
    marketplace: str = "www.amazon.com",
) -> List[ProductRecord]:
    """
    Map a GetItems response body to ProductRecords.

    Raises:
        NotFoundError: well-formed response without any item
        UpstreamError: malformed envelope or item missing identifier/title
    """
    envelope = _build_model(GetItemsEnvelope, raw)
    result = envelope.items_result

    if result is None:
        if envelope.errors:
            raise classify_response(200, raw)
        raise UpstreamError("GetItems response has no ItemsResult.", body=raw)

    if not result.items:
        raise NotFoundError(
            f"No items returned for {', '.join(requested) or 'request'}.",
            body=raw,
            code=_first_error_code(envelope.errors),
        )

    records = [_to_product_record(entry, raw, marketplace) for entry in result.items]

    if requested:
        returned = {r.asin for r in records}
        missing = [asin for asin in requested if asin not in returned]
        if missing:
            logger.info("Catalog returned %d/%d items; missing: %s", len(records), len(requested), ", ".join(missing))
    return records


def normalize_search_items_response(
    raw: Any,
    *,
    page: int = 1,
    marketplace: str = "www.amazon.com",
) -> SearchPage:
    envelope = _build_model(SearchItemsEnvelope, raw)
    result = envelope.search_result

    if result is None:
        if envelope.errors:
            raise classify_response(200, raw)
        raise UpstreamError("SearchItems response has no SearchResult.", body=raw)

    if not result.items:
        raise NotFoundError("Search returned no items.", body=raw, code=_first_error_code(envelope.errors))

    items: List[SearchResultRecord] = []
    for entry in result.items:
        fields = _map_item(entry, raw, marketplace)
        items.append(
            SearchResultRecord(
                asin=fields["asin"],
                title=fields["title"],
                url=fields["url"],
                price=fields["price"],
                image_url=fields["image_url"],
                coupon_detected=fields["coupon_detected"],
            )
        )

    total = _parse_count(result.total_result_count)
    return SearchPage(items=items, total_result_count=total if total is not None else len(items), page=page)


def parse_price(value: Any) -> Optional[Decimal]:
    """Decimal for a usable amount; None for missing, non-numeric, non-finite or negative."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning("Ignoring non-numeric price %r", value)
        return None
    if not amount.is_finite() or amount < 0:
        logger.warning("Ignoring out-of-range price %r", value)
        return None
    return amount


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_product_record(entry: Any, raw: Dict[str, Any], marketplace: str) -> ProductRecord:
    fields = _map_item(entry, raw, marketplace)
    return ProductRecord(
        asin=fields["asin"],
        title=fields["title"],
        url=fields["url"],
        current_price=fields["price"],
        original_price=fields["original_price"],
        image_url=fields["image_url"],
        coupon_detected=fields["coupon_detected"],
    )


def _map_item(entry: Any, raw: Dict[str, Any], marketplace: str) -> Dict[str, Any]:
    if not isinstance(entry, dict):
        raise UpstreamError(f"Catalog item is not an object: {type(entry).__name__}", body=raw)

    item = _build_model(ItemModel, entry, raw=raw)

    asin = item.asin.strip() if isinstance(item.asin, str) else None
    if not asin or not is_valid_identifier(asin):
        raise UpstreamError(f"Catalog item has a missing or malformed ASIN: {item.asin!r}", body=raw)

    title_model = item.item_info.title if item.item_info else None
    title = title_model.display_value if title_model else None
    if not isinstance(title, str) or not title.strip():
        raise UpstreamError(f"Catalog item {asin} has no title.", body=raw)

    listing = item.offers.first_listing if item.offers else None
    price = parse_price(listing.price.amount) if listing and listing.price else None
    original_price = parse_price(listing.saving_basis.amount) if listing and listing.saving_basis else None

    url = item.detail_page_url if isinstance(item.detail_page_url, str) and item.detail_page_url else None

    return {
        "asin": asin.upper(),
        "title": title.strip(),
        "url": url or f"https://{marketplace}/dp/{asin.upper()}",
        "price": price,
        "original_price": original_price,
        "image_url": _image_url(item.images),
        "coupon_detected": bool(listing and listing.promotions),
    }


def _image_url(images: Optional[ImagesModel]) -> Optional[str]:
    primary = images.primary if images else None
    if primary is None:
        return None
    for size in (primary.medium, primary.large, primary.small):
        if size is not None and isinstance(size.url, str) and size.url:
            return size.url
    return None


def _parse_count(value: Any) -> Optional[int]:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def _first_error_code(errors: List[RemoteErrorModel]) -> Optional[str]:
    for err in errors:
        if err.code:
            return str(err.code)
    return None


def _build_model(model_type, payload: Any, raw: Any = None):
    if raw is None:
        raw = payload
    if not isinstance(payload, dict):
        raise UpstreamError(f"Expected a JSON object, got {type(payload).__name__}.", body=raw)
    try:
        return model_type.model_validate(payload)
    except ValidationError as exc:
        raise UpstreamError(f"Response validation failed: {exc}", body=raw) from exc
