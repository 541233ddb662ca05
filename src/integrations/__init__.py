"""
Integrations layer.
This package contains all code used to communicate with the product catalog
service (Amazon Product Advertising API 5):
- contracts/: the records and errors callers see
- signing/: AWS Signature Version 4 request signing
- policy/: error classification and response normalisation
- clients/: the real HTTP client and its in-memory mock

Key rule:
- Callers MUST NOT build or sign catalog requests themselves.
- They call ProductCatalogClient (or MockProductCatalogClient in development).
"""

from .contracts.errors import (
    AuthError,
    CatalogError,
    ConfigurationError,
    ErrorKind,
    NotFoundError,
    RateLimitError,
    TransientError,
    UpstreamError,
    ValidationError,
)
from .contracts.product_catalog import (
    ProductRecord,
    SearchPage,
    SearchResultRecord,
    SigningCredentials,
)
from .signing import canonicalize, sign, sign_request

__all__ = [
    # errors
    "AuthError", "CatalogError", "ConfigurationError", "ErrorKind",
    "NotFoundError", "RateLimitError", "TransientError", "UpstreamError",
    "ValidationError",
    # records
    "ProductRecord", "SearchPage", "SearchResultRecord", "SigningCredentials",
    # signing
    "canonicalize", "sign", "sign_request",
]
