#!/usr/bin/env python3
"""
Product catalog (PA-API 5) diagnostics.

Signing is NOT reimplemented here: every command goes through the same client
and signing module the application uses.

  # Show canonical request / string to sign / Authorization for a lookup
  python scripts/paapi_diagnostics.py sign --operation getitems B08N5WRWNW
  python scripts/paapi_diagnostics.py sign --operation searchitems "usb c cable" --timestamp 20250529T034154Z

  # Live calls (needs AMAZON_ACCESS_KEY / AMAZON_SECRET_KEY / AMAZON_PARTNER_TAG)
  python scripts/paapi_diagnostics.py lookup https://www.amazon.com/dp/B08N5WRWNW
  python scripts/paapi_diagnostics.py search "wireless earbuds" --count 5

  # Same commands against local mock data
  python scripts/paapi_diagnostics.py --mock search "earbuds"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from src.error_handler import ErrorHandler
from src.integrations.clients.mocks.product_catalog import MockProductCatalogClient
from src.integrations.clients.real_http.product_catalog import (
    GET_ITEMS,
    SEARCH_ITEMS,
    ProductCatalogClient,
)
from src.integrations.contracts.errors import CatalogError
from src.utils.identifiers import resolve_identifier

logger = logging.getLogger("paapi_diagnostics")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, "%Y%m%dT%H%M%SZ").replace(tzinfo=timezone.utc)


def build_client(args: argparse.Namespace) -> ProductCatalogClient:
    clock = None
    if getattr(args, "timestamp", None):
        fixed = parse_timestamp(args.timestamp)
        clock = lambda: fixed  # noqa: E731
    if args.mock:
        return MockProductCatalogClient(clock=clock)
    return ProductCatalogClient.from_env(clock=clock)


def cmd_sign(args: argparse.Namespace) -> int:
    client = build_client(args)
    if args.operation == "getitems":
        operation = GET_ITEMS
        payload = client.build_get_items_payload([resolve_identifier(v) for v in args.values])
    else:
        operation = SEARCH_ITEMS
        payload = client.build_search_items_payload(" ".join(args.values), item_count=args.count)

    signed = client.sign(operation, payload)
    sig = signed.signature

    print("### Payload\n")
    print(signed.body.decode("utf-8"))
    print("\n### Canonical request\n")
    print(sig.canonical_request.render())
    print("\n### String to sign\n")
    print(sig.string_to_sign)
    print("\n### Headers\n")
    for name, value in signed.headers.items():
        if name == "Authorization" and not args.show_auth:
            value = value.split("Signature=")[0] + "Signature=" + sig.signature[:8] + "..."
        print(f"{name}: {value}")
    return 0


async def cmd_lookup(args: argparse.Namespace) -> int:
    client = build_client(args)
    identifiers = [resolve_identifier(v) for v in args.values]
    records = await client.get_items(identifiers)
    for record in records:
        print(json.dumps({
            "asin": record.asin,
            "title": record.title,
            "current_price": str(record.current_price) if record.current_price is not None else None,
            "original_price": str(record.original_price) if record.original_price is not None else None,
            "image_url": record.image_url,
            "url": record.url,
            "coupon_detected": record.coupon_detected,
        }, indent=2))
    return 0


async def cmd_search(args: argparse.Namespace) -> int:
    client = build_client(args)
    page = await client.search_items(" ".join(args.values), item_count=args.count, item_page=args.page)
    print(f"{page.total_result_count} results ({page.total_pages} pages), showing page {page.page}\n")
    for i, item in enumerate(page.items, start=1):
        price = f"{item.price}" if item.price is not None else "-"
        print(f"{i:2}. {item.asin}  {price:>10}  {item.title}")
    return 0


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Product catalog API diagnostics")
    parser.add_argument("--mock", action="store_true", help="Use local mock catalog data instead of the live API")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_sign = sub.add_parser("sign", help="Print signing artefacts without sending anything")
    p_sign.add_argument("--operation", choices=["getitems", "searchitems"], default="getitems")
    p_sign.add_argument("--timestamp", help="Fixed X-Amz-Date, e.g. 20250529T034154Z")
    p_sign.add_argument("--count", type=int, default=10)
    p_sign.add_argument("--show-auth", action="store_true", help="Print the full Authorization header")
    p_sign.add_argument("values", nargs="+", help="Identifiers/URLs (getitems) or keywords (searchitems)")

    p_lookup = sub.add_parser("lookup", help="GetItems for identifiers or product URLs")
    p_lookup.add_argument("values", nargs="+")

    p_search = sub.add_parser("search", help="SearchItems by keyword")
    p_search.add_argument("--count", type=int, default=10)
    p_search.add_argument("--page", type=int, default=1)
    p_search.add_argument("values", nargs="+")

    args = parser.parse_args()
    setup_logging(args.verbose)

    try:
        if args.command == "sign":
            return cmd_sign(args)
        if args.command == "lookup":
            return asyncio.run(cmd_lookup(args))
        return asyncio.run(cmd_search(args))
    except CatalogError as exc:
        out = ErrorHandler().handle_exception(exc, context={"command": args.command})
        print(json.dumps(out, indent=2, default=str), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
