"""Catalog API endpoints.

Serves the shop grid, product pages, collections and the filter panel. Every
listing runs the same filter, sort and reveal pipeline over the current
catalog snapshot.
"""

from collections.abc import AsyncGenerator, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request, status

from storefront.catalog.filters import FilterState, ListingMode, default_filter_state, price_bounds
from storefront.catalog.pipeline import build_facets, run_pipeline
from storefront.catalog.records import AvailabilityBucket, Language, ProductRecord
from storefront.catalog.remote import RestCatalogSource, refresh_store
from storefront.catalog.sorting import SortKey
from storefront.catalog.store import CatalogStore, get_catalog_store
from storefront.config import settings
from storefront.exceptions import RemoteSourceDisabledError
from storefront.schemas import (
    CollectionListResponse,
    CollectionSchema,
    ErrorResponse,
    FacetsResponse,
    ProductListResponse,
    ProductSchema,
    RefreshResponse,
)

logger = structlog.get_logger()

router = APIRouter(tags=["Catalog"])


# ============================================================================
# Dependencies
# ============================================================================


def get_store() -> CatalogStore:
    """Get catalog store dependency."""
    return get_catalog_store(seed_sample=settings.seed_sample_catalog)


async def get_catalog_source(request: Request) -> AsyncGenerator[RestCatalogSource, None]:
    """Get remote catalog source dependency.

    Raises:
        RemoteSourceDisabledError: If no backend URL is configured.
    """
    if not settings.backend_url:
        raise RemoteSourceDisabledError()
    source = RestCatalogSource(
        base_url=settings.backend_url,
        api_key=settings.backend_api_key,
        timeout=settings.backend_timeout,
        request_id=getattr(request.state, "request_id", None),
    )
    try:
        yield source
    finally:
        await source.close()


def get_language(
    lang: Annotated[Language | None, Query(description="Display language")] = None,
) -> Language:
    """Resolve the requested display language."""
    return lang or Language(settings.default_language)


@dataclass
class CatalogQuery:
    """Shop grid query: filter selections, sort key and reveal window."""

    search: str
    categories: list[str]
    collections: list[str]
    min_price: float | None
    max_price: float | None
    availability: list[AvailabilityBucket]
    listing: ListingMode
    sort: SortKey
    visible: int

    def filter_state(self, catalog: Sequence[ProductRecord]) -> FilterState:
        """Build the filter state; an open price bound uses the catalog's."""
        price_range = None
        if self.min_price is not None or self.max_price is not None:
            _, high = price_bounds(catalog)
            price_range = (
                Decimal(str(self.min_price)) if self.min_price is not None else Decimal("0"),
                Decimal(str(self.max_price)) if self.max_price is not None else high,
            )
        return FilterState(
            search=self.search,
            categories=tuple(self.categories),
            collections=tuple(self.collections),
            price_range=price_range,
            availability=tuple(self.availability),
            listing=self.listing,
        )


def get_catalog_query(
    search: Annotated[str, Query(max_length=200, description="Search name and description")] = "",
    category: Annotated[list[str] | None, Query(description="Category (repeatable)")] = None,
    collection: Annotated[list[str] | None, Query(description="Collection slug (repeatable)")] = None,
    min_price: Annotated[float | None, Query(ge=0, description="Minimum PLN price")] = None,
    max_price: Annotated[float | None, Query(ge=0, description="Maximum PLN price")] = None,
    availability: Annotated[
        list[AvailabilityBucket] | None, Query(description="Stock bucket (repeatable)")
    ] = None,
    listing: Annotated[str | None, Query(description="all, new or bestseller")] = None,
    sort: Annotated[str | None, Query(description="Sort key")] = None,
    visible: Annotated[int | None, Query(ge=0, description="Revealed product count")] = None,
) -> CatalogQuery:
    """Collect shop grid query parameters."""
    return CatalogQuery(
        search=search,
        categories=category or [],
        collections=collection or [],
        min_price=min_price,
        max_price=max_price,
        availability=availability or [],
        listing=ListingMode.parse(listing),
        sort=SortKey.parse(sort),
        visible=settings.initial_visible_count if visible is None else visible,
    )


def _render(catalog: Sequence[ProductRecord], query: CatalogQuery) -> ProductListResponse:
    filters = query.filter_state(catalog)
    view = run_pipeline(
        catalog,
        filters,
        query.sort,
        visible_count=query.visible,
        reveal_step=settings.reveal_step,
    )
    logger.debug(
        "Catalog view rendered",
        total=view.total,
        visible_count=view.visible_count,
        sort=query.sort.value,
    )
    return ProductListResponse.from_view(view, query.sort.value, filters)


# ============================================================================
# Product Endpoints
# ============================================================================


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    store: Annotated[CatalogStore, Depends(get_store)],
    query: Annotated[CatalogQuery, Depends(get_catalog_query)],
    language: Annotated[Language, Depends(get_language)],
) -> ProductListResponse:
    """List the shop grid.

    Returns:
        Revealed slice of the filtered, sorted catalog with the total count.
    """
    return _render(store.records(language), query)


@router.get(
    "/products/{product_id}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    store: Annotated[CatalogStore, Depends(get_store)],
    language: Annotated[Language, Depends(get_language)],
) -> ProductSchema:
    """Get product details by ID.

    Raises:
        ProductNotFoundError: If the product is not published.
    """
    return ProductSchema.from_record(store.get_product(product_id, language))


@router.get(
    "/products/{product_id}/related",
    response_model=list[ProductSchema],
    responses={404: {"model": ErrorResponse}},
)
async def list_related_products(
    product_id: str,
    store: Annotated[CatalogStore, Depends(get_store)],
    language: Annotated[Language, Depends(get_language)],
    limit: Annotated[int, Query(ge=1, le=24, description="Maximum products")] = 6,
) -> list[ProductSchema]:
    """List products from the same category as the given product.

    Raises:
        ProductNotFoundError: If the product is not published.
    """
    return [
        ProductSchema.from_record(p)
        for p in store.related_products(product_id, language, limit)
    ]


# ============================================================================
# Collection Endpoints
# ============================================================================


@router.get("/collections", response_model=CollectionListResponse)
async def list_collections(
    store: Annotated[CatalogStore, Depends(get_store)],
    language: Annotated[Language, Depends(get_language)],
) -> CollectionListResponse:
    """List active collections with their product counts."""
    products = store.records(language)
    return CollectionListResponse(
        items=[
            CollectionSchema.from_record(
                collection,
                product_count=sum(1 for p in products if collection.slug in p.collection_slugs),
            )
            for collection in store.list_collections(language)
        ]
    )


@router.get(
    "/collections/{slug}",
    response_model=CollectionSchema,
    responses={404: {"model": ErrorResponse}},
)
async def get_collection(
    slug: str,
    store: Annotated[CatalogStore, Depends(get_store)],
    language: Annotated[Language, Depends(get_language)],
) -> CollectionSchema:
    """Get an active collection by slug."""
    collection = store.get_collection(slug, language)
    return CollectionSchema.from_record(
        collection, product_count=len(store.collection_products(slug, language))
    )


@router.get(
    "/collections/{slug}/products",
    response_model=ProductListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_collection_products(
    slug: str,
    store: Annotated[CatalogStore, Depends(get_store)],
    query: Annotated[CatalogQuery, Depends(get_catalog_query)],
    language: Annotated[Language, Depends(get_language)],
) -> ProductListResponse:
    """List a collection's products.

    The ``featured`` order of a collection page is newest first.
    """
    return _render(store.collection_products(slug, language), query)


# ============================================================================
# Catalog Endpoints
# ============================================================================


@router.get("/catalog/facets", response_model=FacetsResponse)
async def get_facets(
    store: Annotated[CatalogStore, Depends(get_store)],
    language: Annotated[Language, Depends(get_language)],
) -> FacetsResponse:
    """Filter panel options and the initial filter state."""
    catalog = store.records(language)
    return FacetsResponse.from_facets(build_facets(catalog), default_filter_state(catalog))


@router.post(
    "/catalog/refresh",
    response_model=RefreshResponse,
    status_code=status.HTTP_200_OK,
    responses={409: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def refresh_catalog(
    store: Annotated[CatalogStore, Depends(get_store)],
    source: Annotated[RestCatalogSource, Depends(get_catalog_source)],
) -> RefreshResponse:
    """Reload the catalog snapshot from the hosted backend.

    Raises:
        CatalogSourceError: If the backend cannot be read; the previous
            snapshot stays in place.
    """
    version = await refresh_store(store, source)
    stats = store.stats()
    return RefreshResponse(
        version=version,
        product_count=stats["product_count"],
        collection_count=stats["collection_count"],
    )
