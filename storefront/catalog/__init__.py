"""Storefront catalog.

Typed product records, the filter/sort/reveal pipeline behind the shop and
collection pages, and the sources that supply catalog rows.
"""

from storefront.catalog.filters import FilterState, ListingMode, apply_filters, default_filter_state
from storefront.catalog.pagination import INITIAL_VISIBLE, REVEAL_STEP, PaginationWindow
from storefront.catalog.pipeline import CatalogFacets, CatalogView, build_facets, run_pipeline
from storefront.catalog.records import (
    AvailabilityBucket,
    CollectionRecord,
    Language,
    ProductRecord,
    classify_stock,
    resolve_catalog,
)
from storefront.catalog.remote import RestCatalogSource, refresh_store
from storefront.catalog.sorting import SortKey, sort_products
from storefront.catalog.store import CatalogSnapshot, CatalogStore, get_catalog_store

__all__ = [
    # Records
    "AvailabilityBucket",
    "CollectionRecord",
    "Language",
    "ProductRecord",
    "classify_stock",
    "resolve_catalog",
    # Filtering
    "FilterState",
    "ListingMode",
    "apply_filters",
    "default_filter_state",
    # Sorting
    "SortKey",
    "sort_products",
    # Pagination
    "INITIAL_VISIBLE",
    "REVEAL_STEP",
    "PaginationWindow",
    # Pipeline
    "CatalogFacets",
    "CatalogView",
    "build_facets",
    "run_pipeline",
    # Sources
    "CatalogSnapshot",
    "CatalogStore",
    "RestCatalogSource",
    "get_catalog_store",
    "refresh_store",
]
