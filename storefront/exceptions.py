"""Storefront exceptions.

Errors raised around the catalog pipeline: lookups that miss and failures of
the hosted backend that supplies catalog rows. The filter/sort/reveal pipeline
itself never raises.
"""

from typing import Any


class StorefrontError(Exception):
    """Base class for all storefront exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize storefront error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Lookup Errors
# ============================================================================


class ProductNotFoundError(StorefrontError):
    """Raised when a product is not in the current catalog snapshot."""

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )


class CollectionNotFoundError(StorefrontError):
    """Raised when no active collection has the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"Collection not found: {slug}",
            details={"slug": slug},
        )


# ============================================================================
# Catalog Source Errors
# ============================================================================


class CatalogSourceError(StorefrontError):
    """Raised when the hosted backend cannot supply catalog rows."""

    def __init__(
        self, table: str, message: str, status_code: int | None = None
    ) -> None:
        """Initialize catalog source error.

        Args:
            table: Backend table that was being read.
            message: Error description.
            status_code: HTTP status code if a response was received.
        """
        super().__init__(
            f"[{table}] {message}",
            details={"table": table, "status_code": status_code},
        )
        self.table = table
        self.status_code = status_code


class RemoteSourceDisabledError(StorefrontError):
    """Raised when a refresh is requested but no backend URL is configured."""

    def __init__(self) -> None:
        super().__init__("Remote catalog source is not configured")
