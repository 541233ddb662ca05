"""
Catalog identifier (ASIN) helpers.

Product links arrive in many shapes (short /dp/ links, SEO slugs, /gp/product/
links, affiliate links with query strings). These helpers reduce them to the
10-character identifier the catalog API expects.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from src.integrations.contracts.errors import ValidationError

logger = logging.getLogger(__name__)

_ID = r"([A-Z0-9]{10})"

# Order matters: the first pattern that matches wins.
_URL_PATTERNS = (
    re.compile(rf"/dp/{_ID}(?:[/?#]|$)", re.IGNORECASE | re.ASCII),
    re.compile(rf"/[^/?#]+/dp/{_ID}(?:[/?#]|$)", re.IGNORECASE | re.ASCII),
    re.compile(rf"/gp/product/{_ID}(?:[/?#]|$)", re.IGNORECASE | re.ASCII),
    re.compile(rf"/[^/?#]+/product/{_ID}(?:[/?#]|$)", re.IGNORECASE | re.ASCII),
    re.compile(rf"/[^/?#]+/{_ID}/", re.IGNORECASE | re.ASCII),
)

_IDENTIFIER = re.compile(r"[A-Z0-9]{10}", re.IGNORECASE | re.ASCII)


def extract_identifier(url: str) -> Optional[str]:
    """Return the identifier embedded in a catalog URL, or None."""
    if not url:
        return None
    for pattern in _URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1).upper()
    return None


def is_valid_identifier(candidate: Optional[str]) -> bool:
    """Exactly 10 alphanumeric characters, any case."""
    if not isinstance(candidate, str):
        return False
    return bool(_IDENTIFIER.fullmatch(candidate))


def normalize_identifier(candidate: str) -> str:
    if not is_valid_identifier(candidate):
        raise ValidationError(
            f"Invalid identifier {candidate!r}: expected a 10-character alphanumeric code."
        )
    return candidate.upper()


def resolve_identifier(value: str) -> str:
    """
    Accept either a bare identifier or a product URL.

    Raises:
        ValidationError: if no valid identifier can be derived
    """
    value = (value or "").strip()
    if is_valid_identifier(value):
        return value.upper()

    if "/" in value:
        extracted = extract_identifier(value)
        if extracted:
            logger.debug("Extracted identifier %s from %s", extracted, value)
            return extracted
        raise ValidationError(f"Could not extract an identifier from URL: {value}")

    return normalize_identifier(value)


def add_affiliate_tag(url: str, tag: str) -> str:
    """Set the `tag` query parameter on a product URL, replacing any existing one."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "tag"]
    query.append(("tag", tag))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
