"""Typed catalog records.

Raw rows from the hosted backend carry optional, nullable and per-language
fields. They are resolved into read-only ``ProductRecord`` and
``CollectionRecord`` snapshots exactly once, at ingestion, so the filter and
sort stages never deal with missing values.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger()

LOW_STOCK_THRESHOLD = 10


# ============================================================================
# Enums
# ============================================================================


class Language(str, Enum):
    """Display languages of the storefront."""

    EN = "en"
    PL = "pl"


class AvailabilityBucket(str, Enum):
    """Mutually exclusive stock-level classification."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def classify_stock(quantity: int) -> AvailabilityBucket:
    """Classify a stock quantity into its availability bucket.

    Args:
        quantity: Units in stock.

    Returns:
        ``in_stock`` above 10 units, ``low_stock`` for 1 to 10 units,
        ``out_of_stock`` otherwise.
    """
    if quantity > LOW_STOCK_THRESHOLD:
        return AvailabilityBucket.IN_STOCK
    if quantity >= 1:
        return AvailabilityBucket.LOW_STOCK
    return AvailabilityBucket.OUT_OF_STOCK


# ============================================================================
# Field Coercion
# ============================================================================


def _decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


def _count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


def _rating(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(number, 0.0)


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    # Naive timestamps from the backend are UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _localized(row: Mapping[str, Any], base: str, language: Language) -> str:
    """Pick ``<base>_<lang>``, falling back to the other language."""
    preferred = row.get(f"{base}_{language.value}")
    if preferred:
        return str(preferred)
    for other in Language:
        fallback = row.get(f"{base}_{other.value}")
        if fallback:
            return str(fallback)
    return str(row.get(base) or "")


# ============================================================================
# Records
# ============================================================================


@dataclass(frozen=True)
class ProductRecord:
    """Read-only product snapshot consumed by the catalog pipeline.

    Attributes:
        id: Opaque product identifier.
        display_name: Name in the active display language.
        description: Long-form description in the active display language.
        category: Optional category tag (e.g. "Floral").
        collection_slugs: Slugs of the collections the product belongs to.
        price_major: Price in PLN.
        price_secondary: Price in EUR, informational only.
        stock_quantity: Units in stock.
        image_url: Product image URL.
        created_at: Creation timestamp, used by the "newest" sort.
        sales_count: Units sold, used by the "popular" sort.
        avg_rating: Average review rating, used by the "rating" sort.
        is_new: Shown under "New Arrivals".
        is_bestseller: Shown under "Bestsellers".
    """

    id: str
    display_name: str
    price_major: Decimal
    price_secondary: Decimal = Decimal("0")
    description: str = ""
    category: str | None = None
    collection_slugs: frozenset[str] = field(default_factory=frozenset)
    stock_quantity: int = 0
    image_url: str | None = None
    created_at: datetime | None = None
    sales_count: int = 0
    avg_rating: float = 0.0
    is_new: bool = False
    is_bestseller: bool = False

    @property
    def availability(self) -> AvailabilityBucket:
        """Availability bucket derived from the stock quantity."""
        return classify_stock(self.stock_quantity)

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        language: Language = Language.EN,
        collection_slugs: Iterable[str] = (),
    ) -> "ProductRecord":
        """Create a record from a raw backend ``products`` row.

        Args:
            row: Raw row as returned by the backend.
            language: Active display language.
            collection_slugs: Slugs of collections the product belongs to.

        Returns:
            ProductRecord with defaults applied.
        """
        tag = (row.get("preferred_card_tag") or "").lower()
        return cls(
            id=str(row["id"]),
            display_name=_localized(row, "name", language),
            description=_localized(row, "description", language),
            category=row.get("category") or None,
            collection_slugs=frozenset(collection_slugs),
            price_major=_decimal(row.get("price_pln")),
            price_secondary=_decimal(row.get("price_eur")),
            stock_quantity=_count(row.get("stock_quantity")),
            image_url=row.get("image_url"),
            created_at=_timestamp(row.get("created_at")),
            sales_count=_count(row.get("sales_count")),
            avg_rating=_rating(row.get("avg_rating")),
            is_new=bool(row.get("is_new")) or tag == "new",
            is_bestseller=bool(row.get("is_bestseller")) or tag == "bestseller",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.display_name,
            "description": self.description,
            "category": self.category,
            "collections": sorted(self.collection_slugs),
            "price": {"pln": self.price_major, "eur": self.price_secondary},
            "stock_quantity": self.stock_quantity,
            "availability": self.availability.value,
            "image_url": self.image_url,
            "created_at": self.created_at,
            "sales_count": self.sales_count,
            "avg_rating": self.avg_rating,
            "is_new": self.is_new,
            "is_bestseller": self.is_bestseller,
        }


@dataclass(frozen=True)
class CollectionRecord:
    """Read-only curated collection (e.g. "Luxury Collection")."""

    id: str
    slug: str
    display_name: str
    description: str = ""
    image_url: str | None = None
    display_order: int = 0
    featured: bool = False
    is_active: bool = True

    @classmethod
    def from_row(
        cls, row: Mapping[str, Any], language: Language = Language.EN
    ) -> "CollectionRecord":
        """Create a record from a raw backend ``collections`` row."""
        is_active = row.get("is_active")
        return cls(
            id=str(row["id"]),
            slug=str(row["slug"]),
            display_name=_localized(row, "name", language),
            description=_localized(row, "description", language),
            image_url=row.get("image_url"),
            display_order=_count(row.get("display_order")),
            featured=bool(row.get("featured")),
            is_active=True if is_active is None else bool(is_active),
        )


# ============================================================================
# Catalog Resolution
# ============================================================================


def resolve_catalog(
    product_rows: Iterable[Mapping[str, Any]],
    collection_rows: Iterable[Mapping[str, Any]],
    membership_rows: Iterable[Mapping[str, Any]] = (),
    language: Language = Language.EN,
) -> tuple[list[ProductRecord], list[CollectionRecord]]:
    """Resolve raw backend rows into typed records.

    Collection memberships come from both the product's own
    ``collection_id`` column and the ``product_collections`` join table.
    Unpublished products and inactive collections are dropped.

    Args:
        product_rows: Raw ``products`` rows.
        collection_rows: Raw ``collections`` rows.
        membership_rows: Raw ``product_collections`` rows.
        language: Active display language.

    Returns:
        Tuple of (products, active collections), products in source order.
    """
    collections = [CollectionRecord.from_row(row, language) for row in collection_rows]
    slug_by_id = {c.id: c.slug for c in collections if c.is_active}

    memberships: dict[str, set[str]] = defaultdict(set)
    for row in membership_rows:
        slug = slug_by_id.get(str(row.get("collection_id")))
        if slug:
            memberships[str(row.get("product_id"))].add(slug)

    products = []
    skipped = 0
    for row in product_rows:
        if row.get("published") is False:
            skipped += 1
            continue
        product_id = str(row["id"])
        slugs = set(memberships.get(product_id, ()))
        direct = slug_by_id.get(str(row.get("collection_id")))
        if direct:
            slugs.add(direct)
        products.append(ProductRecord.from_row(row, language, slugs))

    if skipped:
        logger.debug("Skipped unpublished products", count=skipped)

    return products, [c for c in collections if c.is_active]
