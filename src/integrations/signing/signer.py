"""
AWS Signature Version 4 signing engine.

Chain: secret -> kDate -> kRegion -> kService -> kSigning, then
HMAC(kSigning, string_to_sign). Everything here is pure given the
credentials, the timestamp and the canonical request.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Union

from src.integrations.contracts.errors import ConfigurationError
from src.integrations.contracts.product_catalog import SigningCredentials
from src.integrations.signing.canonical import CanonicalRequest, canonicalize

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
SCOPE_TERMINATOR = "aws4_request"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def format_amz_date(moment: datetime) -> str:
    """Basic ISO-8601 in UTC, no punctuation or milliseconds: 20250529T034154Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(AMZ_DATE_FORMAT)


@dataclass(frozen=True)
class SigningContext:
    amz_date: str
    date_stamp: str
    credential_scope: str

    @classmethod
    def create(cls, moment: datetime, region: str, service: str) -> "SigningContext":
        amz_date = format_amz_date(moment)
        date_stamp = amz_date[:8]
        return cls(
            amz_date=amz_date,
            date_stamp=date_stamp,
            credential_scope=f"{date_stamp}/{region}/{service}/{SCOPE_TERMINATOR}",
        )


@dataclass(frozen=True)
class Signature:
    context: SigningContext
    canonical_request: CanonicalRequest
    string_to_sign: str
    signature: str
    authorization: str


@dataclass(frozen=True)
class SignedRequest:
    """Wire headers plus the intermediate artefacts, for diagnostics."""

    headers: Dict[str, str]
    body: bytes
    signature: Signature


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    k_date = _hmac(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, SCOPE_TERMINATOR)


def build_string_to_sign(context: SigningContext, canonical: CanonicalRequest) -> str:
    return "\n".join([ALGORITHM, context.amz_date, context.credential_scope, canonical.digest()])


def ensure_credentials(credentials: Optional[SigningCredentials]) -> SigningCredentials:
    if credentials is None:
        raise ConfigurationError("Signing credentials are not configured.")
    missing = credentials.missing_fields()
    if missing:
        raise ConfigurationError(f"Signing credentials incomplete; missing: {', '.join(missing)}")
    return credentials


def sign(
    credentials: SigningCredentials,
    canonical: CanonicalRequest,
    context: SigningContext,
) -> Signature:
    """Compute the signature and Authorization header for a canonical request."""
    credentials = ensure_credentials(credentials)

    string_to_sign = build_string_to_sign(context, canonical)
    signing_key = derive_signing_key(
        credentials.secret_key, context.date_stamp, credentials.region, credentials.service
    )
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    authorization = (
        f"{ALGORITHM} Credential={credentials.access_key}/{context.credential_scope}, "
        f"SignedHeaders={canonical.signed_headers}, Signature={signature}"
    )
    return Signature(
        context=context,
        canonical_request=canonical,
        string_to_sign=string_to_sign,
        signature=signature,
        authorization=authorization,
    )


def sign_request(
    credentials: SigningCredentials,
    *,
    method: str,
    host: str,
    uri: str,
    headers: Mapping[str, str],
    payload: Union[str, bytes],
    moment: Optional[datetime] = None,
) -> SignedRequest:
    """
    Sign a request and return the complete header set to send.

    `host` and `x-amz-date` are added here; every header in `headers` is signed.
    The returned body is the exact byte sequence that was hashed.
    """
    credentials = ensure_credentials(credentials)
    moment = moment or datetime.now(timezone.utc)
    context = SigningContext.create(moment, credentials.region, credentials.service)

    body = payload.encode("utf-8") if isinstance(payload, str) else payload
    wire_headers: Dict[str, str] = dict(headers)
    wire_headers["Host"] = host
    wire_headers["X-Amz-Date"] = context.amz_date

    canonical = canonicalize(method, uri, wire_headers, body)
    signature = sign(credentials, canonical, context)
    wire_headers["Authorization"] = signature.authorization

    logger.debug(
        "Signed %s %s scope=%s signed_headers=%s",
        method, uri, context.credential_scope, canonical.signed_headers,
    )
    return SignedRequest(headers=wire_headers, body=body, signature=signature)
