"""Catalog sorting.

Orders filtered products by the sort dropdown selection. All orderings are
stable, so products that tie (same price, same rating) keep their catalog
order.
"""

import unicodedata
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum

from storefront.catalog.records import ProductRecord

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

# Letters NFKD does not decompose
_FOLD_EXTRA = str.maketrans({"ł": "l", "Ł": "L", "ø": "o", "Ø": "O", "ß": "ss"})


class SortKey(str, Enum):
    """Sort dropdown options."""

    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME = "name"
    NEWEST = "newest"
    POPULAR = "popular"
    RATING = "rating"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Parse a sort key; unknown values fall back to ``featured``.

        Args:
            value: Raw sort key, including the shop page's legacy
                ``price-low``/``price-high`` names.

        Returns:
            Matching SortKey.
        """
        if not value:
            return cls.FEATURED
        value = _ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.FEATURED


_ALIASES = {
    "price-low": SortKey.PRICE_ASC.value,
    "price-high": SortKey.PRICE_DESC.value,
}


def name_sort_key(name: str) -> tuple[str, str]:
    """Collation key for display names.

    Compares accent-folded, case-folded text first so "Ćma" sorts beside
    "Cedr" rather than after "Z", then the case-folded original to order
    accented variants after their base letter.
    """
    decomposed = unicodedata.normalize("NFKD", name.translate(_FOLD_EXTRA))
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.casefold())


def sort_products(
    products: Iterable[ProductRecord], key: SortKey | str
) -> list[ProductRecord]:
    """Return a new list ordered by the given sort key.

    Args:
        products: Filtered product records.
        key: Sort key or its string value.

    Returns:
        Sorted products; ``featured`` keeps the input order.
    """
    key = key if isinstance(key, SortKey) else SortKey.parse(key)
    items = list(products)

    if key == SortKey.PRICE_ASC:
        items.sort(key=lambda p: p.price_major)
    elif key == SortKey.PRICE_DESC:
        items.sort(key=lambda p: p.price_major, reverse=True)
    elif key == SortKey.NAME:
        items.sort(key=lambda p: name_sort_key(p.display_name))
    elif key == SortKey.NEWEST:
        # Missing timestamps rank below every real one
        items.sort(
            key=lambda p: (p.created_at is not None, p.created_at or _EPOCH),
            reverse=True,
        )
    elif key == SortKey.POPULAR:
        items.sort(key=lambda p: p.sales_count, reverse=True)
    elif key == SortKey.RATING:
        items.sort(key=lambda p: p.avg_rating, reverse=True)

    return items
