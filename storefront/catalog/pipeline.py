"""Catalog view pipeline.

Pure function from (catalog, filters, sort key, visible count) to the slice
the shop grid renders, plus facet aggregation for the filter panel.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.catalog.filters import FilterState, apply_filters, price_bounds
from storefront.catalog.pagination import INITIAL_VISIBLE, REVEAL_STEP, PaginationWindow
from storefront.catalog.records import AvailabilityBucket, ProductRecord
from storefront.catalog.sorting import SortKey, sort_products


@dataclass(frozen=True)
class CatalogView:
    """Rendered catalog slice.

    Attributes:
        items: Revealed products, in display order.
        total: Number of products after filtering.
        visible_count: Reveal window size the slice was cut with.
        has_more: Whether "load more" should be shown.
        next_visible: Window size after one more reveal.
    """

    items: list[ProductRecord]
    total: int
    visible_count: int
    has_more: bool
    next_visible: int


@dataclass(frozen=True)
class CatalogFacets:
    """Values available in the filter panel for a catalog."""

    categories: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("0")
    availability: dict[AvailabilityBucket, int] = field(default_factory=dict)
    total: int = 0


def run_pipeline(
    catalog: Sequence[ProductRecord],
    filter_state: FilterState | None = None,
    sort_key: SortKey | str = SortKey.FEATURED,
    visible_count: int = INITIAL_VISIBLE,
    reveal_step: int = REVEAL_STEP,
) -> CatalogView:
    """Filter, sort and window a catalog.

    Args:
        catalog: Product records in source order.
        filter_state: Filter selections, None for no restriction.
        sort_key: Sort dropdown selection.
        visible_count: Current reveal window size.
        reveal_step: Products added by one "load more".

    Returns:
        CatalogView with the revealed slice and the filtered total.
    """
    filtered = apply_filters(catalog, filter_state or FilterState())
    ordered = sort_products(filtered, sort_key)
    total = len(ordered)

    window = PaginationWindow(visible_count=visible_count, step=reveal_step)
    items = window.window(ordered)
    has_more = window.has_more(total)

    return CatalogView(
        items=items,
        total=total,
        visible_count=window.visible_count,
        has_more=has_more,
        next_visible=window.reveal_more(total),
    )


def build_facets(catalog: Sequence[ProductRecord]) -> CatalogFacets:
    """Aggregate filter panel options from a catalog.

    Args:
        catalog: Product records.

    Returns:
        Categories and collections present, price bounds and the number of
        products in each availability bucket.
    """
    buckets = Counter(product.availability for product in catalog)
    minimum, maximum = price_bounds(catalog)
    return CatalogFacets(
        categories=sorted({p.category for p in catalog if p.category}),
        collections=sorted({slug for p in catalog for slug in p.collection_slugs}),
        min_price=minimum,
        max_price=maximum,
        availability={bucket: buckets.get(bucket, 0) for bucket in AvailabilityBucket},
        total=len(catalog),
    )
