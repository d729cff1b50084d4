"""Tests for the in-memory catalog store."""

import pytest

from storefront.catalog.records import AvailabilityBucket, Language
from storefront.catalog.store import (
    SAMPLE_CANDLES,
    CatalogSnapshot,
    CatalogStore,
    build_sample_snapshot,
    get_catalog_store,
)
from storefront.exceptions import CollectionNotFoundError, ProductNotFoundError


@pytest.fixture
def store() -> CatalogStore:
    """Create a store with the sample catalog."""
    return CatalogStore.with_sample_catalog(seed=42)


class TestSampleSnapshot:
    """Tests for the generated sample catalog."""

    def test_deterministic_generation(self):
        """Test that the same seed produces the same rows."""
        assert build_sample_snapshot(7) == build_sample_snapshot(7)

    def test_different_seeds_produce_different_ids(self):
        """Test that product IDs depend on the seed."""
        ids1 = {row["id"] for row in build_sample_snapshot(1).products}
        ids2 = {row["id"] for row in build_sample_snapshot(2).products}

        assert ids1 != ids2

    def test_every_bucket_represented(self, store: CatalogStore):
        """Test that the sample covers all availability buckets."""
        buckets = {p.availability for p in store.records()}

        assert buckets == set(AvailabilityBucket)


class TestCatalogStore:
    """Tests for CatalogStore."""

    def test_records(self, store: CatalogStore):
        """Test that all sample candles are published."""
        assert len(store.records()) == len(SAMPLE_CANDLES)
        assert store.version == 1

    def test_records_in_polish(self, store: CatalogStore):
        """Test resolving names in Polish."""
        names = {p.display_name for p in store.records(Language.PL)}

        assert "Mistyczna Róża" in names

    def test_get_product(self, store: CatalogStore):
        """Test getting a product by ID."""
        product_id = store.records()[0].id

        assert store.get_product(product_id).id == product_id

    def test_get_product_not_found(self, store: CatalogStore):
        """Test that an unknown ID raises."""
        with pytest.raises(ProductNotFoundError) as exc_info:
            store.get_product("missing")

        assert exc_info.value.details == {"product_id": "missing"}

    def test_list_collections_in_display_order(self, store: CatalogStore):
        """Test collection ordering."""
        slugs = [c.slug for c in store.list_collections()]

        assert slugs == ["luxury", "fresh", "romantic", "bestsellers"]

    def test_get_collection_not_found(self, store: CatalogStore):
        """Test that an unknown slug raises."""
        with pytest.raises(CollectionNotFoundError):
            store.get_collection("winter")

    def test_collection_products_newest_first(self, store: CatalogStore):
        """Test that collection members are ordered newest first."""
        products = store.collection_products("luxury")

        assert products
        assert all("luxury" in p.collection_slugs for p in products)
        dates = [p.created_at for p in products]
        assert dates == sorted(dates, reverse=True)

    def test_bestsellers_include_join_table_members(self, store: CatalogStore):
        """Test that bestsellers tagged elsewhere join the bestsellers collection."""
        members = store.collection_products("bestsellers")

        assert {p.display_name for p in members} >= {"Golden Embrace", "Divine Femininity", "Oud Majesty"}

    def test_replace_swaps_snapshot(self, store: CatalogStore):
        """Test that replace swaps the whole snapshot."""
        store.replace(
            CatalogSnapshot(products=[{"id": "only", "name_en": "Only Candle", "price_pln": 10}])
        )

        assert [p.id for p in store.records()] == ["only"]
        assert store.list_collections() == []
        assert store.version == 2
        assert store.stats()["product_count"] == 1

    def test_replace_copies_rows(self):
        """Test that later changes to the caller's list do not leak in."""
        rows = [{"id": "1", "name_en": "One"}]
        store = CatalogStore()
        store.replace(CatalogSnapshot(products=rows))

        rows.append({"id": "2", "name_en": "Two"})

        assert len(store.records()) == 1


class TestGetCatalogStore:
    """Tests for the store singleton."""

    def test_singleton(self):
        """Test that the same instance is returned."""
        assert get_catalog_store() is get_catalog_store()

    def test_unseeded(self):
        """Test creating an empty store."""
        store = get_catalog_store(seed_sample=False)

        assert store.records() == []
        assert store.version == 0


class TestRelatedProducts:
    """Tests for CatalogStore.related_products."""

    @pytest.fixture
    def woody_store(self) -> CatalogStore:
        """Store with eight woody candles and one floral candle."""
        rows = [
            {"id": f"w{i}", "name_en": f"Woody {i}", "category": "Woody", "price_pln": 90}
            for i in range(8)
        ]
        rows.append({"id": "f0", "name_en": "Floral", "category": "Floral", "price_pln": 90})
        rows.append({"id": "x0", "name_en": "Hidden Woody", "category": "Woody", "published": False})
        return CatalogStore(CatalogSnapshot(products=rows))

    def test_same_category_only(self, store: CatalogStore):
        """Test that related products share the viewed product's category."""
        golden = next(p for p in store.records() if p.display_name == "Golden Embrace")

        related = store.related_products(golden.id)

        assert {p.display_name for p in related} == {
            "Velvet Dreams",
            "Divine Femininity",
            "White Jasmine",
            "Peony Blush",
            "Rose Absolue",
        }

    def test_excludes_current_product(self, woody_store: CatalogStore):
        """Test that the viewed product is not related to itself."""
        related = woody_store.related_products("w0", limit=20)

        assert "w0" not in [p.id for p in related]
        assert [p.id for p in related] == [f"w{i}" for i in range(1, 8)]

    def test_default_limit(self, woody_store: CatalogStore):
        """Test that at most six related products are returned."""
        related = woody_store.related_products("w3")

        assert len(related) == 6
        assert all(p.category == "Woody" for p in related)

    def test_uncategorized_product(self, woody_store: CatalogStore):
        """Test that a product without a category relates to any other."""
        woody_store.replace(
            CatalogSnapshot(
                products=[
                    {"id": "plain", "name_en": "Plain"},
                    {"id": "f0", "name_en": "Floral", "category": "Floral"},
                ]
            )
        )

        assert [p.id for p in woody_store.related_products("plain")] == ["f0"]

    def test_unknown_product(self, woody_store: CatalogStore):
        """Test that an unknown product raises."""
        with pytest.raises(ProductNotFoundError):
            woody_store.related_products("missing")
