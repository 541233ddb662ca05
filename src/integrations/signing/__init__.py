"""
Request signing (AWS Signature Version 4).

This package is the ONLY place that canonicalizes and signs catalog requests.
The HTTP client and the diagnostics script both go through `canonicalize` and
`sign` / `sign_request`.
"""

from .canonical import CanonicalRequest, canonicalize, sha256_hex
from .signer import (
    ALGORITHM,
    Signature,
    SignedRequest,
    SigningContext,
    build_string_to_sign,
    derive_signing_key,
    format_amz_date,
    sign,
    sign_request,
)

__all__ = [
    "ALGORITHM",
    "CanonicalRequest",
    "Signature",
    "SignedRequest",
    "SigningContext",
    "build_string_to_sign",
    "canonicalize",
    "derive_signing_key",
    "format_amz_date",
    "sha256_hex",
    "sign",
    "sign_request",
]
