"""
Real Product Catalog HTTP Client (PA-API 5).

Purpose:
- Signs and sends GetItems / SearchItems requests
- Classifies failures into the local error taxonomy (no retries here)
- Normalizes successful responses into ProductRecord / SearchPage contracts

Usage:
    client = ProductCatalogClient.from_env()
    products = await client.get_items(["B08N5WRWNW"])
    page = await client.search_items("wireless earbuds")

Important:
- Every request is signed through src/integrations/signing; nothing else in
  the codebase builds Authorization headers.
- Validation failures are raised before any network activity.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from src.integrations.contracts.errors import ConfigurationError, NotFoundError, UpstreamError, ValidationError
from src.integrations.contracts.product_catalog import ProductRecord, SearchPage, SigningCredentials
from src.integrations.policy.error_classifier import classify_response, classify_transport_error
from src.integrations.policy.response_wrappers import (
    normalize_get_items_response,
    normalize_search_items_response,
)
from src.integrations.signing import SignedRequest, sign_request
from src.integrations.signing.signer import ensure_credentials
from src.utils.config_loader import REGION_ENV, CatalogEndpointConfig, load_catalog_config, load_credentials
from src.utils.identifiers import normalize_identifier, resolve_identifier

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json; charset=utf-8"
CONTENT_ENCODING = "amz-1.0"
TARGET_PREFIX = "com.amazon.paapi5.v1.ProductAdvertisingAPIv1."
MAX_SEARCH_ITEM_COUNT = 10
MAX_SEARCH_PAGE = 10


@dataclass(frozen=True)
class Operation:
    name: str
    path: str

    @property
    def target(self) -> str:
        return f"{TARGET_PREFIX}{self.name}"


GET_ITEMS = Operation("GetItems", "/paapi5/getitems")
SEARCH_ITEMS = Operation("SearchItems", "/paapi5/searchitems")


def serialize_payload(payload: Dict[str, Any]) -> str:
    # The serialized string is what gets hashed; it is sent byte-for-byte.
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class ProductCatalogClient:
    def __init__(
        self,
        credentials: SigningCredentials,
        config: Optional[CatalogEndpointConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None,
        allow_region_override: bool = False,
    ) -> None:
        self.credentials = ensure_credentials(credentials)
        self.config = config or CatalogEndpointConfig()
        self.host = self.config.host
        self.marketplace = self.config.marketplace
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        locale_region = self.config.endpoint.region
        if self.credentials.region != locale_region:
            if not allow_region_override:
                raise ConfigurationError(
                    f"Signing region '{self.credentials.region}' does not match region '{locale_region}' "
                    f"of locale '{self.config.locale}' ({self.host}). Pass allow_region_override=True "
                    "to sign with a different region on purpose."
                )
            logger.warning(
                "Signing with region %s for %s (locale region is %s)",
                self.credentials.region, self.host, locale_region,
            )

    @classmethod
    def from_env(cls, config: Optional[CatalogEndpointConfig] = None, **kwargs: Any) -> "ProductCatalogClient":
        config = config or load_catalog_config().catalog
        credentials = load_credentials(default_region=config.endpoint.region)
        # AMAZON_REGION is an explicit override of the locale's region.
        kwargs.setdefault("allow_region_override", bool((os.environ.get(REGION_ENV) or "").strip()))
        logger.info(
            "Catalog client configured: host=%s region=%s partner_tag=%s access_key=%s...",
            config.host, credentials.region, credentials.partner_tag, credentials.access_key[:4],
        )
        return cls(credentials, config, **kwargs)

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    def _partner_fields(self) -> Dict[str, Any]:
        return {
            "PartnerTag": self.credentials.partner_tag,
            "PartnerType": self.config.partner_type,
            "Marketplace": self.marketplace,
        }

    def build_get_items_payload(
        self, identifiers: Iterable[str], resources: Optional[Sequence[str]] = None
    ) -> Dict[str, Any]:
        item_ids = self._validate_identifiers(identifiers)
        return {
            "ItemIds": item_ids,
            **self._partner_fields(),
            "Resources": list(resources or self.config.lookup_resources),
        }

    def build_search_items_payload(
        self,
        keyword: str,
        *,
        item_count: int = 10,
        item_page: int = 1,
        search_index: Optional[str] = None,
        resources: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        keyword = (keyword or "").strip()
        if len(keyword) < self.config.min_keyword_length:
            raise ValidationError(
                f"Search keyword must be at least {self.config.min_keyword_length} characters; got {keyword!r}."
            )
        if not 1 <= item_count <= MAX_SEARCH_ITEM_COUNT:
            raise ValidationError(f"item_count must be between 1 and {MAX_SEARCH_ITEM_COUNT}; got {item_count}.")
        if not 1 <= item_page <= MAX_SEARCH_PAGE:
            raise ValidationError(f"item_page must be between 1 and {MAX_SEARCH_PAGE}; got {item_page}.")

        return {
            "Keywords": keyword,
            "ItemCount": item_count,
            "ItemPage": item_page,
            "SearchIndex": search_index or self.config.search_index,
            **self._partner_fields(),
            "Resources": list(resources or self.config.search_resources),
        }

    def _validate_identifiers(self, identifiers: Iterable[str]) -> List[str]:
        if isinstance(identifiers, str):
            identifiers = [identifiers]
        item_ids: List[str] = []
        for candidate in identifiers or []:
            asin = normalize_identifier(candidate)
            if asin not in item_ids:
                item_ids.append(asin)

        if not item_ids:
            raise ValidationError("At least one identifier is required.")
        if len(item_ids) > self.config.max_batch_size:
            raise ValidationError(
                f"At most {self.config.max_batch_size} identifiers per lookup; got {len(item_ids)}."
            )
        return item_ids

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get_items(
        self, identifiers: Iterable[str], resources: Optional[Sequence[str]] = None
    ) -> List[ProductRecord]:
        _, records = await self._lookup(identifiers, resources)
        return records

    async def get_item(self, identifier_or_url: str) -> ProductRecord:
        asin = resolve_identifier(identifier_or_url)
        data, records = await self._lookup([asin])
        for record in records:
            if record.asin == asin:
                return record
        raise NotFoundError(
            f"Catalog returned {', '.join(r.asin for r in records)} but not {asin}.", body=data
        )

    async def _lookup(
        self, identifiers: Iterable[str], resources: Optional[Sequence[str]] = None
    ) -> Tuple[Any, List[ProductRecord]]:
        payload = self.build_get_items_payload(identifiers, resources)
        data = await self._dispatch(GET_ITEMS, payload)
        records = normalize_get_items_response(data, requested=payload["ItemIds"], marketplace=self.marketplace)
        return data, records

    async def search_items(
        self,
        keyword: str,
        *,
        item_count: int = 10,
        item_page: int = 1,
        search_index: Optional[str] = None,
        resources: Optional[Sequence[str]] = None,
    ) -> SearchPage:
        payload = self.build_search_items_payload(
            keyword,
            item_count=item_count,
            item_page=item_page,
            search_index=search_index,
            resources=resources,
        )
        data = await self._dispatch(SEARCH_ITEMS, payload)
        return normalize_search_items_response(data, page=item_page, marketplace=self.marketplace)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def sign(self, operation: Operation, payload: Dict[str, Any]) -> SignedRequest:
        return sign_request(
            self.credentials,
            method="POST",
            host=self.host,
            uri=operation.path,
            headers={
                "Content-Encoding": CONTENT_ENCODING,
                "Content-Type": CONTENT_TYPE,
                "X-Amz-Target": operation.target,
            },
            payload=serialize_payload(payload),
            moment=self._clock(),
        )

    async def _dispatch(self, operation: Operation, payload: Dict[str, Any]) -> Any:
        signed = self.sign(operation, payload)
        url = f"https://{self.host}{operation.path}"

        logger.debug("POST %s target=%s", url, operation.target)
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, content=signed.body, headers=signed.headers)
        except httpx.TransportError as exc:
            raise classify_transport_error(exc) from exc

        body = _decode_body(response)
        if response.is_success:
            if body is None:
                raise UpstreamError(
                    f"{operation.name} returned a non-JSON body.", status=response.status_code, body=response.text
                )
            return body

        raise classify_response(response.status_code, body if body is not None else response.text)


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
