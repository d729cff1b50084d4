"""Tests for the catalog view pipeline."""

from decimal import Decimal

import pytest

from storefront.catalog.filters import FilterState
from storefront.catalog.pipeline import build_facets, run_pipeline
from storefront.catalog.records import AvailabilityBucket
from storefront.catalog.sorting import SortKey


@pytest.fixture
def big_catalog(make_product):
    """25 products with varied prices."""
    return [
        make_product(f"p{i:02d}", price_major=(i * 37) % 200, stock_quantity=i)
        for i in range(25)
    ]


class TestRunPipeline:
    """Tests for run_pipeline."""

    def test_example_scenario(self, three_products):
        """Test price and availability filter with descending price sort."""
        state = FilterState().with_price_range(0, 120).with_availability(["in_stock", "low_stock"])

        view = run_pipeline(three_products, state, SortKey.PRICE_DESC)

        assert [p.id for p in view.items] == ["B"]
        assert view.total == 1
        assert view.has_more is False

    def test_defaults_show_first_ten(self, big_catalog):
        """Test that no filters and no sort show the first ten in order."""
        view = run_pipeline(big_catalog)

        assert [p.id for p in view.items] == [f"p{i:02d}" for i in range(10)]
        assert view.total == 25
        assert view.visible_count == 10
        assert view.has_more is True
        assert view.next_visible == 20

    @pytest.mark.parametrize("visible", [0, 3, 10, 20, 25, 40])
    def test_rendered_length_bound(self, big_catalog, visible):
        """Test that the slice length is min(visible, total)."""
        view = run_pipeline(big_catalog, visible_count=visible)

        assert len(view.items) == min(visible, view.total)

    def test_reveal_sequence(self, big_catalog):
        """Test following next_visible until the list is exhausted."""
        counts = []
        visible = 10
        while True:
            view = run_pipeline(big_catalog, visible_count=visible)
            counts.append(len(view.items))
            if not view.has_more:
                break
            visible = view.next_visible

        assert counts == [10, 20, 25]

    def test_idempotent(self, big_catalog):
        """Test that identical inputs give identical output."""
        state = FilterState(search="candle").with_price_range(20, 150)

        first = run_pipeline(big_catalog, state, SortKey.PRICE_ASC, 20)
        second = run_pipeline(big_catalog, state, SortKey.PRICE_ASC, 20)

        assert first == second

    def test_sorted_before_windowing(self, big_catalog):
        """Test that the window is cut from the sorted list."""
        view = run_pipeline(big_catalog, sort_key=SortKey.PRICE_ASC, visible_count=5)

        cheapest = sorted(p.price_major for p in big_catalog)[:5]
        assert [p.price_major for p in view.items] == cheapest

    def test_empty_catalog(self):
        """Test running over an empty catalog."""
        view = run_pipeline([])

        assert view.items == []
        assert view.total == 0
        assert view.has_more is False


class TestBuildFacets:
    """Tests for build_facets."""

    def test_facets(self, make_product):
        """Test aggregated categories, collections, prices and buckets."""
        catalog = [
            make_product("1", category="Floral", collection_slugs={"romantic"}, price_major=87, stock_quantity=0),
            make_product("2", category="Woody", collection_slugs={"luxury", "romantic"}, price_major=139, stock_quantity=4),
            make_product("3", category="Floral", price_major=95, stock_quantity=40),
            make_product("4", price_major=75, stock_quantity=12),
        ]

        facets = build_facets(catalog)

        assert facets.categories == ["Floral", "Woody"]
        assert facets.collections == ["luxury", "romantic"]
        assert facets.min_price == Decimal("75")
        assert facets.max_price == Decimal("139")
        assert facets.availability == {
            AvailabilityBucket.IN_STOCK: 2,
            AvailabilityBucket.LOW_STOCK: 1,
            AvailabilityBucket.OUT_OF_STOCK: 1,
        }
        assert facets.total == 4

    def test_empty_facets(self):
        """Test facets of an empty catalog."""
        facets = build_facets([])

        assert facets.categories == []
        assert facets.total == 0
        assert all(count == 0 for count in facets.availability.values())
