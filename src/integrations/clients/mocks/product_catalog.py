"""
Mock Product Catalog Client.

Purpose:
- Serves PA-API shaped responses from local item data, without any network calls
- Lets host applications and tests exercise the full client path (validation,
  signing, classification, normalisation) with deterministic data

Behavior guidelines:
- GetItems returns the known items; unknown ASINs come back as
  ItemNotAccessible errors, the way the real service reports them
- SearchItems matches the keyword against titles (case-insensitive) and pages
  results by ItemCount / ItemPage; no match is a 404 NoResults
- Requests without an Authorization header are rejected with 401

Swap:
Use clients/real_http/product_catalog.py (ProductCatalogClient.from_env) once
credentials are available.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from src.integrations.clients.real_http.product_catalog import GET_ITEMS, SEARCH_ITEMS, ProductCatalogClient
from src.integrations.contracts.product_catalog import SigningCredentials
from src.utils.config_loader import CatalogEndpointConfig

logger = logging.getLogger(__name__)

DEFAULT_ITEMS_PATH = Path(__file__).parent / "data" / "catalog_items.json"

MOCK_CREDENTIALS = SigningCredentials(
    access_key="AKIDMOCKCATALOG",
    secret_key="mock-secret-key",
    partner_tag="mock-20",
)


def load_local_items(path: Optional[Path] = None) -> List[Dict[str, Any]]:
    path = path or DEFAULT_ITEMS_PATH
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class MockProductCatalogClient(ProductCatalogClient):
    """ProductCatalogClient backed by an in-memory catalog instead of the network."""

    def __init__(
        self,
        items: Optional[Iterable[Dict[str, Any]]] = None,
        config: Optional[CatalogEndpointConfig] = None,
        credentials: Optional[SigningCredentials] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        source = list(items) if items is not None else load_local_items()
        self.items: Dict[str, Dict[str, Any]] = {str(item["ASIN"]).upper(): item for item in source}
        self.requests: List[httpx.Request] = []
        if credentials is None:
            region = (config or CatalogEndpointConfig()).endpoint.region
            credentials = replace(MOCK_CREDENTIALS, region=region)
        super().__init__(credentials, config, transport=httpx.MockTransport(self._handle), clock=clock)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "authorization" not in request.headers:
            return _error_response(401, "IncompleteSignature", "Request is missing Authentication Token.")

        payload = json.loads(request.content or b"{}")
        target = request.headers.get("x-amz-target", "")
        if target == GET_ITEMS.target:
            return self._get_items(payload)
        if target == SEARCH_ITEMS.target:
            return self._search_items(payload)
        return _error_response(400, "UnknownOperation", f"Unsupported target: {target}")

    def _get_items(self, payload: Dict[str, Any]) -> httpx.Response:
        found, errors = [], []
        for asin in payload.get("ItemIds", []):
            item = self.items.get(str(asin).upper())
            if item is None:
                errors.append({"Code": "ItemNotAccessible", "Message": f"The ItemId {asin} is not accessible through the Product Advertising API."})
            else:
                found.append(item)

        body: Dict[str, Any] = {}
        if found:
            body["ItemsResult"] = {"Items": found}
        if errors:
            body["Errors"] = errors
        logger.debug("[MOCK] GetItems %s -> %d found", payload.get("ItemIds"), len(found))
        return httpx.Response(200, json=body)

    def _search_items(self, payload: Dict[str, Any]) -> httpx.Response:
        keyword = str(payload.get("Keywords", "")).lower()
        matches = [
            item
            for item in self.items.values()
            if keyword in str(item.get("ItemInfo", {}).get("Title", {}).get("DisplayValue", "")).lower()
        ]
        if not matches:
            return _error_response(404, "NoResults", "No results found for your request.")

        count = int(payload.get("ItemCount", 10))
        page = int(payload.get("ItemPage", 1))
        start = (page - 1) * count
        logger.debug("[MOCK] SearchItems %r -> %d matches", keyword, len(matches))
        return httpx.Response(
            200,
            json={
                "SearchResult": {
                    "Items": matches[start:start + count],
                    "TotalResultCount": len(matches),
                }
            },
        )


def _error_response(status: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(status, json={"Errors": [{"Code": code, "Message": message}]})
