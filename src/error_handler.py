"""Error rendering helpers for catalog client callers."""
from typing import Any, Dict
import logging

from src.integrations.contracts.errors import CatalogError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, CatalogError):
            logger.warning("Catalog request failed (%s): %s", exc.kind.value, exc.message)
            return {
                "kind": exc.kind.value,
                "message": exc.message,
                "retryable": exc.retryable,
                "status": exc.status,
                "code": exc.code,
                "metadata": {"context": context or {}},
            }

        logger.error("Unhandled exception in catalog client: %s", exc, exc_info=True)
        return {
            "kind": "INTERNAL",
            "message": "An internal error occurred while contacting the product catalog. Please try again later.",
            "retryable": False,
            "status": None,
            "code": None,
            "metadata": {"error": str(exc), "context": context or {}},
        }
