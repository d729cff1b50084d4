"""Shared test fixtures."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

# Reset global store before importing app
import storefront.catalog.store as store_module
from storefront.catalog.records import ProductRecord


@pytest.fixture(autouse=True)
def reset_store():
    """Reset the global catalog store before each test."""
    store_module._catalog_store = None
    yield
    store_module._catalog_store = None


@pytest.fixture
def client():
    """Create test client."""
    from storefront.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_product():
    """Factory for product records with sensible defaults."""

    def _make(product_id: str, **overrides) -> ProductRecord:
        fields = {
            "id": product_id,
            "display_name": f"Candle {product_id}",
            "price_major": Decimal("100"),
            "price_secondary": Decimal("23"),
            "stock_quantity": 20,
        }
        for name in ("price_major", "price_secondary"):
            if name in overrides:
                overrides[name] = Decimal(str(overrides[name]))
        if "collection_slugs" in overrides:
            overrides["collection_slugs"] = frozenset(overrides["collection_slugs"])
        fields.update(overrides)
        return ProductRecord(**fields)

    return _make


@pytest.fixture
def three_products(make_product) -> list[ProductRecord]:
    """A(50 PLN, out of stock), B(100 PLN, 5 left), C(150 PLN, 20 left)."""
    return [
        make_product("A", display_name="Amber", price_major=50, stock_quantity=0),
        make_product("B", display_name="Birch", price_major=100, stock_quantity=5),
        make_product("C", display_name="Cedar", price_major=150, stock_quantity=20),
    ]


@pytest.fixture
def raw_product_row() -> dict:
    """A raw ``products`` row as returned by the hosted backend."""
    return {
        "id": "p-1",
        "name_en": "Mystic Rose",
        "name_pl": "Mistyczna Róża",
        "description_en": "Black coffee, white flowers and vanilla.",
        "description_pl": "Czarna kawa, białe kwiaty i wanilia.",
        "category": "Oriental",
        "collection_id": "col-luxury",
        "price_pln": "89.00",
        "price_eur": 21,
        "stock_quantity": 7,
        "image_url": "https://cdn.example/rose.png",
        "created_at": "2024-05-01T12:00:00Z",
        "preferred_card_tag": "new",
        "published": True,
    }
