"""Tests for catalog sorting."""

from datetime import datetime, timezone

import pytest

from storefront.catalog.sorting import SortKey, name_sort_key, sort_products


class TestSortKeyParse:
    """Tests for SortKey.parse."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("price-asc", SortKey.PRICE_ASC),
            ("price-low", SortKey.PRICE_ASC),
            ("price-high", SortKey.PRICE_DESC),
            ("rating", SortKey.RATING),
            ("bogus", SortKey.FEATURED),
            ("", SortKey.FEATURED),
            (None, SortKey.FEATURED),
        ],
    )
    def test_parse(self, raw, expected):
        """Test parsing sort keys and legacy aliases."""
        assert SortKey.parse(raw) == expected


class TestSortProducts:
    """Tests for sort_products."""

    def test_featured_keeps_order(self, three_products):
        """Test that featured is the identity order."""
        reversed_catalog = list(reversed(three_products))

        result = sort_products(reversed_catalog, SortKey.FEATURED)

        assert [p.id for p in result] == ["C", "B", "A"]
        assert result is not reversed_catalog

    def test_unknown_key_is_featured(self, three_products):
        """Test that an unknown string key leaves the order unchanged."""
        result = sort_products(three_products, "cheapest-first")

        assert [p.id for p in result] == ["A", "B", "C"]

    def test_price_ascending(self, make_product):
        """Test that adjacent prices are non-decreasing."""
        catalog = [make_product(str(i), price_major=p) for i, p in enumerate([99, 45, 120, 45, 80])]

        result = sort_products(catalog, SortKey.PRICE_ASC)

        prices = [p.price_major for p in result]
        assert all(a <= b for a, b in zip(prices, prices[1:]))

    def test_price_descending_is_stable(self, make_product):
        """Test that tied prices keep their input order when descending."""
        catalog = [
            make_product("first", price_major=90),
            make_product("top", price_major=120),
            make_product("second", price_major=90),
            make_product("third", price_major=90),
        ]

        result = sort_products(catalog, SortKey.PRICE_DESC)

        assert [p.id for p in result] == ["top", "first", "second", "third"]

    def test_name_is_accent_and_case_insensitive(self, make_product):
        """Test that Polish letters sort beside their base letter."""
        catalog = [
            make_product("z", display_name="Zielona Figa"),
            make_product("s", display_name="Świeca Lniana"),
            make_product("l", display_name="Łąka"),
            make_product("c", display_name="cedr"),
            make_product("a", display_name="Ambra"),
        ]

        result = sort_products(catalog, SortKey.NAME)

        assert [p.id for p in result] == ["a", "c", "l", "s", "z"]

    def test_name_sort_key_orders_accent_after_base(self):
        """Test that an accented name follows its unaccented twin."""
        assert name_sort_key("Roza") < name_sort_key("Róża")

    def test_newest_puts_missing_dates_last(self, make_product):
        """Test that products without a creation date sort last."""
        catalog = [
            make_product("undated"),
            make_product("old", created_at=datetime(2023, 1, 1, tzinfo=timezone.utc)),
            make_product("new", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)),
            make_product("undated-2"),
        ]

        result = sort_products(catalog, SortKey.NEWEST)

        assert [p.id for p in result] == ["new", "old", "undated", "undated-2"]

    def test_popular_and_rating_descending(self, make_product):
        """Test popularity and rating sorts with default zeros."""
        catalog = [
            make_product("none"),
            make_product("hot", sales_count=300, avg_rating=4.1),
            make_product("loved", sales_count=20, avg_rating=4.9),
        ]

        assert [p.id for p in sort_products(catalog, SortKey.POPULAR)] == ["hot", "loved", "none"]
        assert [p.id for p in sort_products(catalog, SortKey.RATING)] == ["loved", "hot", "none"]
