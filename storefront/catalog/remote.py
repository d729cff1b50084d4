"""Hosted backend catalog source.

Reads the ``products``, ``collections`` and ``product_collections`` tables
through the backend's REST interface and hands the rows to the catalog store
as one snapshot.
"""

from typing import Any

import httpx
import structlog

from storefront.catalog.store import CatalogSnapshot, CatalogStore
from storefront.exceptions import CatalogSourceError

logger = structlog.get_logger()

# table -> row filter
TABLE_QUERIES: dict[str, dict[str, str]] = {
    "products": {"select": "*", "published": "eq.true"},
    "collections": {"select": "*", "is_active": "eq.true"},
    "product_collections": {"select": "product_id,collection_id"},
}


class RestCatalogSource:
    """HTTP client for the hosted backend's catalog tables.

    Example usage:
        source = RestCatalogSource("https://project.backend.example", api_key)
        snapshot = await source.fetch_snapshot()
        await source.close()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        request_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize catalog source.

        Args:
            base_url: Backend project URL.
            api_key: Public (anon) API key.
            timeout: Request timeout in seconds.
            request_id: Optional request ID for correlation.
            transport: Optional httpx transport override.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.request_id = request_id
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            if self.request_id:
                headers["X-Request-ID"] = self.request_id
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_table(self, table: str) -> list[dict[str, Any]]:
        """Fetch all rows of one catalog table.

        Args:
            table: Table name, one of ``TABLE_QUERIES``.

        Returns:
            Raw rows.

        Raises:
            CatalogSourceError: On network failure, non-200 status or a
                payload that is not a list of rows.
        """
        client = await self._get_client()
        try:
            response = await client.get(f"/{table}", params=TABLE_QUERIES[table])
        except httpx.HTTPError as e:
            logger.warning("Catalog fetch failed", table=table, error=str(e))
            raise CatalogSourceError(table, f"Request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(
                "Catalog fetch rejected",
                table=table,
                status_code=response.status_code,
            )
            raise CatalogSourceError(
                table,
                f"Unexpected response: {response.text}",
                response.status_code,
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise CatalogSourceError(table, "Invalid JSON payload", 200) from e
        if not isinstance(rows, list):
            raise CatalogSourceError(table, "Expected a list of rows", 200)
        return rows

    async def fetch_snapshot(self) -> CatalogSnapshot:
        """Fetch every catalog table.

        Returns:
            CatalogSnapshot with the current rows.

        Raises:
            CatalogSourceError: If any table cannot be read.
        """
        snapshot = CatalogSnapshot(
            products=await self.fetch_table("products"),
            collections=await self.fetch_table("collections"),
            memberships=await self.fetch_table("product_collections"),
        )
        logger.info(
            "Catalog snapshot fetched",
            products=len(snapshot.products),
            collections=len(snapshot.collections),
            memberships=len(snapshot.memberships),
        )
        return snapshot


async def refresh_store(store: CatalogStore, source: RestCatalogSource) -> int:
    """Load a fresh snapshot from the backend into the store.

    The store keeps its previous snapshot if the fetch fails.

    Args:
        store: Catalog store to update.
        source: Backend source.

    Returns:
        New store version.
    """
    snapshot = await source.fetch_snapshot()
    store.replace(snapshot)
    return store.version
