"""Catalog filtering.

Applies the shop page's filter panel to a list of product records. Every
predicate group is ANDed with the others; multi-select groups (categories,
collections, availability) match when any selected value matches. A group
whose selection is empty does not restrict anything.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any

from storefront.catalog.records import AvailabilityBucket, ProductRecord


class ListingMode(str, Enum):
    """Legacy "filter by" dropdown of the shop page."""

    ALL = "all"
    NEW = "new"
    BESTSELLER = "bestseller"

    @classmethod
    def parse(cls, value: str | None) -> "ListingMode":
        """Parse a listing mode, falling back to ``all``."""
        try:
            return cls(value) if value else cls.ALL
        except ValueError:
            return cls.ALL


PriceRange = tuple[Decimal, Decimal]


@dataclass(frozen=True)
class FilterState:
    """Filter panel selections.

    Attributes:
        search: Free-text search, matched against name and description.
        categories: Selected categories (empty = any).
        collections: Selected collection slugs (empty = any).
        price_range: Inclusive (min, max) PLN range, None = unbounded.
        availability: Selected availability buckets (empty = any).
        listing: All products, new arrivals or bestsellers.
    """

    search: str = ""
    categories: tuple[str, ...] = ()
    collections: tuple[str, ...] = ()
    price_range: PriceRange | None = None
    availability: tuple[AvailabilityBucket, ...] = ()
    listing: ListingMode = ListingMode.ALL

    def with_search(self, text: str) -> "FilterState":
        return replace(self, search=text)

    def with_categories(self, categories: Iterable[str]) -> "FilterState":
        return replace(self, categories=tuple(categories))

    def with_collections(self, slugs: Iterable[str]) -> "FilterState":
        return replace(self, collections=tuple(slugs))

    def with_price_range(
        self, minimum: Decimal | int | float, maximum: Decimal | int | float
    ) -> "FilterState":
        return replace(
            self, price_range=(Decimal(str(minimum)), Decimal(str(maximum)))
        )

    def with_availability(
        self, buckets: Iterable[AvailabilityBucket | str]
    ) -> "FilterState":
        return replace(
            self, availability=tuple(AvailabilityBucket(b) for b in buckets)
        )

    def with_listing(self, mode: ListingMode | str) -> "FilterState":
        return replace(self, listing=ListingMode(mode))

    def is_default(self, bounds: PriceRange | None = None) -> bool:
        """Check whether no restriction is active.

        Args:
            bounds: Catalog price bounds; a price range equal to them counts
                as unrestricted.

        Returns:
            True if every predicate is vacuous.
        """
        price_open = self.price_range is None or self.price_range == bounds
        return (
            not self.search
            and not self.categories
            and not self.collections
            and price_open
            and not self.availability
            and self.listing == ListingMode.ALL
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "search": self.search,
            "categories": list(self.categories),
            "collections": list(self.collections),
            "price_range": (
                [float(v) for v in self.price_range] if self.price_range else None
            ),
            "availability": [b.value for b in self.availability],
            "listing": self.listing.value,
        }


# ============================================================================
# Predicates
# ============================================================================


def matches_search(product: ProductRecord, text: str) -> bool:
    if text == "":
        return True
    needle = text.lower()
    return needle in product.display_name.lower() or needle in product.description.lower()


def matches_category(product: ProductRecord, categories: Sequence[str]) -> bool:
    return not categories or product.category in categories


def matches_collection(product: ProductRecord, slugs: Sequence[str]) -> bool:
    return not slugs or not product.collection_slugs.isdisjoint(slugs)


def matches_price(product: ProductRecord, price_range: PriceRange | None) -> bool:
    if price_range is None:
        return True
    minimum, maximum = price_range
    return minimum <= product.price_major <= maximum


def matches_availability(
    product: ProductRecord, buckets: Sequence[AvailabilityBucket]
) -> bool:
    return not buckets or product.availability in buckets


def matches_listing(product: ProductRecord, mode: ListingMode) -> bool:
    if mode == ListingMode.NEW:
        return product.is_new
    if mode == ListingMode.BESTSELLER:
        return product.is_bestseller
    return True


def matches(product: ProductRecord, state: FilterState) -> bool:
    """Check a product against every active predicate."""
    return (
        matches_search(product, state.search)
        and matches_category(product, state.categories)
        and matches_collection(product, state.collections)
        and matches_price(product, state.price_range)
        and matches_availability(product, state.availability)
        and matches_listing(product, state.listing)
    )


def apply_filters(
    catalog: Iterable[ProductRecord], state: FilterState
) -> list[ProductRecord]:
    """Return the products satisfying the filter state, in catalog order.

    Args:
        catalog: Product records.
        state: Filter selections.

    Returns:
        Matching products.
    """
    return [product for product in catalog if matches(product, state)]


def price_bounds(catalog: Iterable[ProductRecord]) -> PriceRange:
    """Observed (min, max) PLN price, (0, 0) for an empty catalog."""
    prices = [product.price_major for product in catalog]
    if not prices:
        return (Decimal("0"), Decimal("0"))
    return (min(prices), max(prices))


def default_filter_state(catalog: Iterable[ProductRecord]) -> FilterState:
    """Initial filter state for a freshly mounted shop page.

    The price range spans the whole catalog; every other selection is empty.
    """
    return FilterState(price_range=price_bounds(catalog))
