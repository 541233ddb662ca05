"""
Error taxonomy for the product catalog integration.

Every failure the catalog client can produce is one of the classes below.
Callers decide retry policy from the class (or `kind` / `retryable`):

- RateLimitError, TransientError: safe to retry with backoff
- ValidationError, ConfigurationError, AuthError: never retry
- NotFoundError, UpstreamError: permanent for this request
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "CONFIGURATION"
    VALIDATION = "VALIDATION"
    RATE_LIMIT = "RATE_LIMIT"
    AUTH = "AUTH"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM = "UPSTREAM"
    TRANSIENT = "TRANSIENT"


class CatalogError(Exception):
    """Base class for classified catalog failures."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        body: Any = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status={self.status}, code={self.code})"


class ConfigurationError(CatalogError):
    kind = ErrorKind.CONFIGURATION


class ValidationError(CatalogError):
    kind = ErrorKind.VALIDATION


class RateLimitError(CatalogError):
    kind = ErrorKind.RATE_LIMIT
    retryable = True


class AuthError(CatalogError):
    """The remote rejected our signature or credentials."""

    kind = ErrorKind.AUTH


class NotFoundError(CatalogError):
    kind = ErrorKind.NOT_FOUND


class UpstreamError(CatalogError):
    """Malformed or unexpected response from the catalog service."""

    kind = ErrorKind.UPSTREAM


class TransientError(CatalogError):
    kind = ErrorKind.TRANSIENT
    retryable = True
