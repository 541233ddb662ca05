from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from src.integrations.contracts.errors import (
    AuthError,
    CatalogError,
    NotFoundError,
    RateLimitError,
    TransientError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

THROTTLING_CODES = frozenset({"TooManyRequests", "RequestThrottled", "ThrottlingException"})

AUTH_CODES = frozenset(
    {
        "InvalidSignature",
        "IncompleteSignature",
        "UnrecognizedClient",
        "AccessDenied",
        "AccessDeniedAwsUsers",
        "InvalidAssociate",
        "AssociateNotEligible",
        "ExpiredToken",
    }
)

NOT_FOUND_CODES = frozenset({"NoResults", "ItemNotAccessible", "ResourceNotFound"})


def extract_remote_error(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """Return (code, message) from a PA-API error body, if any."""
    if not isinstance(body, dict):
        return None, None

    errors = body.get("Errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        return _clean(first.get("Code")), _clean(first.get("Message"))

    # Some gateway rejections use the generic AWS JSON error shape.
    code = _clean(body.get("__type"))
    if code and "#" in code:
        code = code.rsplit("#", 1)[-1]
    return code, _clean(body.get("message") or body.get("Message"))


def classify_response(status: int, body: Any) -> CatalogError:
    """
    Map a non-success HTTP response to the local error taxonomy.

    The remote error code wins over the status when both are informative.
    """
    code, remote_message = extract_remote_error(body)
    message = remote_message or f"Catalog API responded with HTTP {status}"
    kwargs: Dict[str, Any] = {"status": status, "body": body, "code": code}

    if code in THROTTLING_CODES or status == 429:
        error: CatalogError = RateLimitError(message, **kwargs)
    elif code in AUTH_CODES or status in (401, 403):
        error = AuthError(message, **kwargs)
    elif code in NOT_FOUND_CODES or status == 404:
        error = NotFoundError(message, **kwargs)
    elif status >= 500:
        error = TransientError(message, **kwargs)
    else:
        error = UpstreamError(message, **kwargs)

    if isinstance(error, AuthError):
        # Usually a signing regression rather than a transient blip.
        logger.error("Catalog API rejected request signature: status=%s code=%s message=%s", status, code, message)
    else:
        logger.warning("Catalog API failure classified as %s: status=%s code=%s", error.kind.value, status, code)
    return error


def classify_transport_error(exc: Exception) -> TransientError:
    if isinstance(exc, httpx.TimeoutException):
        message = f"Catalog API request timed out: {exc}"
    else:
        message = f"Catalog API unreachable: {exc}"
    logger.warning(message)
    return TransientError(message)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
