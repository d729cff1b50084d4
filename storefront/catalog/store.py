"""In-memory catalog store.

Holds the latest snapshot of raw catalog rows supplied by the hosted backend
and resolves them into typed records per display language. Snapshots are
replaced wholesale; nothing in the pipeline mutates them.
"""

import hashlib
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog

from storefront.catalog.records import (
    CollectionRecord,
    Language,
    ProductRecord,
    resolve_catalog,
)
from storefront.catalog.sorting import SortKey, name_sort_key, sort_products
from storefront.exceptions import CollectionNotFoundError, ProductNotFoundError

logger = structlog.get_logger()


# ============================================================================
# Sample Catalog
# ============================================================================

SAMPLE_COLLECTIONS = [
    {
        "id": "col-luxury",
        "slug": "luxury",
        "name_en": "Luxury Collection",
        "name_pl": "Kolekcja Luksusowa",
        "description_en": "Premium fragrances inspired by the world's most exclusive perfumes",
        "description_pl": "Ekskluzywne zapachy inspirowane najbardziej luksusowymi perfumami",
        "display_order": 1,
        "featured": True,
        "is_active": True,
    },
    {
        "id": "col-fresh",
        "slug": "fresh",
        "name_en": "Fresh & Clean",
        "name_pl": "Świeże i Czyste",
        "description_en": "Light, airy scents that refresh and energize your space",
        "description_pl": "Lekkie, zwiewne zapachy, które odświeżają wnętrze",
        "display_order": 2,
        "featured": False,
        "is_active": True,
    },
    {
        "id": "col-romantic",
        "slug": "romantic",
        "name_en": "Romantic Evening",
        "name_pl": "Romantyczny Wieczór",
        "description_en": "Intimate, warm fragrances perfect for special moments",
        "description_pl": "Ciepłe, zmysłowe zapachy na wyjątkowe chwile",
        "display_order": 3,
        "featured": False,
        "is_active": True,
    },
    {
        "id": "col-bestsellers",
        "slug": "bestsellers",
        "name_en": "Best Sellers",
        "name_pl": "Bestsellery",
        "description_en": "Our most loved candles chosen by customers worldwide",
        "description_pl": "Najchętniej wybierane świece naszych klientów",
        "display_order": 4,
        "featured": True,
        "is_active": True,
    },
]

# (name_en, name_pl, inspired by, category, collection, price_pln, price_eur, card tag)
SAMPLE_CANDLES = [
    ("Mystic Rose", "Mistyczna Róża", "Black Opium", "Oriental", "luxury", 89, 21, "new"),
    ("Golden Embrace", "Złote Objęcia", "Chanel No. 5", "Floral", "bestsellers", 95, 22, "bestseller"),
    ("Velvet Dreams", "Aksamitne Sny", "Tom Ford Velvet Orchid", "Floral", "romantic", 99, 23, None),
    ("Midnight Passion", "Północna Namiętność", "Dior Sauvage", "Woody", "luxury", 92, 21, None),
    ("Royal Essence", "Królewska Esencja", "Creed Aventus", "Woody", "luxury", 109, 25, "new"),
    ("Divine Femininity", "Boska Kobiecość", "Miss Dior", "Floral", "romantic", 87, 20, "bestseller"),
    ("Ocean Breeze", "Morska Bryza", "Acqua di Gio", "Fresh", "fresh", 85, 20, None),
    ("Amber Nights", "Bursztynowe Noce", "Baccarat Rouge 540", "Amber", "luxury", 119, 28, None),
    ("Citrus Morning", "Cytrusowy Poranek", "Jo Malone Lime Basil", "Fresh", "fresh", 79, 18, "new"),
    ("Cedar Whisper", "Szept Cedru", "Le Labo Santal 33", "Woody", None, 105, 24, None),
    ("Vanilla Silk", "Waniliowy Jedwab", "Guerlain Shalimar", "Oriental", "romantic", 94, 22, None),
    ("White Jasmine", "Biały Jaśmin", "Gucci Bloom", "Floral", None, 88, 20, None),
    ("Smoky Leather", "Dymna Skóra", "Tom Ford Tuscan Leather", "Woody", "luxury", 129, 30, None),
    ("Linen Air", "Lniany Powiew", "Clean Warm Cotton", "Fresh", "fresh", 75, 17, None),
    ("Oud Majesty", "Majestat Oud", "Maison Francis Kurkdjian Oud", "Oriental", "luxury", 139, 32, "bestseller"),
    ("Peony Blush", "Piwoniowy Rumieniec", "Chloé Eau de Parfum", "Floral", "romantic", 91, 21, None),
    ("Spiced Amber", "Korzenny Bursztyn", "Viktor&Rolf Spicebomb", "Amber", None, 97, 23, None),
    ("Green Fig", "Zielona Figa", "Diptyque Philosykos", "Fresh", "fresh", 93, 22, None),
    ("Tobacco Vanille", "Tytoń i Wanilia", "Tom Ford Tobacco Vanille", "Amber", "luxury", 125, 29, None),
    ("Rose Absolue", "Absolut Różany", "Lancôme La Vie Est Belle", "Floral", "bestsellers", 99, 23, "bestseller"),
    ("Sea Salt Sage", "Sól Morska i Szałwia", "Jo Malone Wood Sage & Sea Salt", "Fresh", "fresh", 84, 19, None),
    ("Black Orchid", "Czarna Orchidea", "Tom Ford Black Orchid", "Oriental", "romantic", 115, 27, "new"),
    ("Sandalwood Calm", "Spokój Drzewa Sandałowego", "Santal Royal", "Woody", None, 101, 23, None),
    ("Honey Amber", "Miodowy Bursztyn", "Kilian Angels' Share", "Amber", "bestsellers", 111, 26, None),
]

SAMPLE_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


@dataclass
class CatalogSnapshot:
    """Raw rows as read from the hosted backend tables."""

    products: list[dict[str, Any]] = field(default_factory=list)
    collections: list[dict[str, Any]] = field(default_factory=list)
    memberships: list[dict[str, Any]] = field(default_factory=list)


def _deterministic_seed(*args: str | int) -> int:
    """Create deterministic seed from arguments."""
    data = "|".join(str(a) for a in args)
    hash_bytes = hashlib.md5(data.encode()).digest()
    return int.from_bytes(hash_bytes[:4], "big")


def build_sample_snapshot(seed: int = 42) -> CatalogSnapshot:
    """Generate the sample candle catalog.

    Stock levels, sales and ratings are derived from the seed so that every
    availability bucket is represented and the output is reproducible.

    Args:
        seed: Random seed.

    Returns:
        CatalogSnapshot with products, collections and memberships.
    """
    slug_to_id = {c["slug"]: c["id"] for c in SAMPLE_COLLECTIONS}
    products = []
    memberships = []

    for index, candle in enumerate(SAMPLE_CANDLES):
        name_en, name_pl, inspired_by, category, collection, pln, eur, tag = candle
        rng = random.Random(_deterministic_seed(seed, index))
        product_id = hashlib.md5(f"candle:{index}:{seed}".encode()).hexdigest()[:32]

        products.append(
            {
                "id": product_id,
                "name_en": name_en,
                "name_pl": name_pl,
                "description_en": f"Soy candle inspired by {inspired_by}.",
                "description_pl": f"Świeca sojowa inspirowana zapachem {inspired_by}.",
                "category": category,
                "collection_id": slug_to_id.get(collection) if collection else None,
                "price_pln": pln,
                "price_eur": eur,
                "stock_quantity": (0, rng.randint(1, 10), rng.randint(11, 60))[index % 3],
                "image_url": f"https://picsum.photos/seed/{product_id[:8]}/400/400",
                "created_at": (
                    SAMPLE_EPOCH + timedelta(days=rng.randint(0, 365))
                ).isoformat(),
                "sales_count": rng.randint(0, 500),
                "avg_rating": round(rng.uniform(3.5, 5.0), 1),
                "preferred_card_tag": tag,
                "published": True,
            }
        )

        # Bestsellers also appear in the curated bestsellers collection
        if tag == "bestseller" and collection != "bestsellers":
            memberships.append(
                {"product_id": product_id, "collection_id": slug_to_id["bestsellers"]}
            )

    return CatalogSnapshot(
        products=products,
        collections=[dict(c) for c in SAMPLE_COLLECTIONS],
        memberships=memberships,
    )


# ============================================================================
# Catalog Store
# ============================================================================


class CatalogStore:
    """In-memory holder of the current catalog snapshot.

    Example usage:
        store = get_catalog_store()
        products = store.records(Language.PL)
        luxury = store.collection_products("luxury", Language.EN)
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        """Initialize store.

        Args:
            snapshot: Initial rows; empty catalog if omitted.
        """
        self._snapshot = snapshot or CatalogSnapshot()
        self.version = 0
        self.updated_at: datetime | None = None

    @classmethod
    def with_sample_catalog(cls, seed: int = 42) -> "CatalogStore":
        """Create a store seeded with the sample candle catalog."""
        store = cls()
        store.replace(build_sample_snapshot(seed))
        return store

    def replace(self, snapshot: CatalogSnapshot) -> None:
        """Swap in a fresh snapshot from the backend.

        Args:
            snapshot: New raw rows.
        """
        self._snapshot = CatalogSnapshot(
            products=list(snapshot.products),
            collections=list(snapshot.collections),
            memberships=list(snapshot.memberships),
        )
        self.version += 1
        self.updated_at = datetime.now(timezone.utc)
        logger.info(
            "Catalog snapshot replaced",
            version=self.version,
            product_rows=len(snapshot.products),
            collection_rows=len(snapshot.collections),
        )

    def _resolve(
        self, language: Language
    ) -> tuple[list[ProductRecord], list[CollectionRecord]]:
        return resolve_catalog(
            self._snapshot.products,
            self._snapshot.collections,
            self._snapshot.memberships,
            language,
        )

    def records(self, language: Language = Language.EN) -> list[ProductRecord]:
        """Published products in source order."""
        products, _ = self._resolve(language)
        return products

    def get_product(
        self, product_id: str, language: Language = Language.EN
    ) -> ProductRecord:
        """Get a published product by ID.

        Raises:
            ProductNotFoundError: If the product is not in the snapshot.
        """
        for product in self.records(language):
            if product.id == product_id:
                return product
        raise ProductNotFoundError(product_id)

    def list_collections(
        self, language: Language = Language.EN
    ) -> list[CollectionRecord]:
        """Active collections ordered by display order, then name."""
        _, collections = self._resolve(language)
        return sorted(
            collections,
            key=lambda c: (c.display_order, name_sort_key(c.display_name)),
        )

    def get_collection(
        self, slug: str, language: Language = Language.EN
    ) -> CollectionRecord:
        """Get an active collection by slug.

        Raises:
            CollectionNotFoundError: If no active collection has the slug.
        """
        for collection in self.list_collections(language):
            if collection.slug == slug:
                return collection
        raise CollectionNotFoundError(slug)

    def collection_products(
        self, slug: str, language: Language = Language.EN
    ) -> list[ProductRecord]:
        """Products of a collection, newest first.

        Raises:
            CollectionNotFoundError: If no active collection has the slug.
        """
        self.get_collection(slug, language)
        members = [p for p in self.records(language) if slug in p.collection_slugs]
        return sort_products(members, SortKey.NEWEST)

    def related_products(
        self, product_id: str, language: Language = Language.EN, limit: int = 6
    ) -> list[ProductRecord]:
        """Products shown under "You May Also Like" on a product page.

        Other published products of the same category, in catalog order. A
        product without a category is related to every other product.

        Args:
            product_id: Product being viewed.
            language: Active display language.
            limit: Maximum number of related products.

        Raises:
            ProductNotFoundError: If the product is not in the snapshot.
        """
        current = self.get_product(product_id, language)
        related = [
            p
            for p in self.records(language)
            if p.id != current.id
            and (current.category is None or p.category == current.category)
        ]
        return related[: max(limit, 0)]

    def stats(self) -> dict[str, Any]:
        """Snapshot statistics."""
        products, collections = self._resolve(Language.EN)
        return {
            "version": self.version,
            "product_count": len(products),
            "collection_count": len(collections),
            "updated_at": self.updated_at,
        }


# Global catalog store instance
_catalog_store: CatalogStore | None = None


def get_catalog_store(seed_sample: bool = True) -> CatalogStore:
    """Get or create the catalog store instance.

    Args:
        seed_sample: Seed the sample catalog on first creation.

    Returns:
        CatalogStore instance.
    """
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = (
            CatalogStore.with_sample_catalog() if seed_sample else CatalogStore()
        )
    return _catalog_store
