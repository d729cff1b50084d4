"""Pydantic schemas for the Storefront API.

Defines response models for products, collections, catalog facets and errors.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from storefront.catalog.filters import FilterState
from storefront.catalog.pipeline import CatalogFacets, CatalogView
from storefront.catalog.records import AvailabilityBucket, CollectionRecord, ProductRecord


# ============================================================================
# Common Types
# ============================================================================


class PriceSchema(BaseModel):
    """Price in both storefront currencies."""

    pln: float = Field(..., ge=0, description="Price in PLN")
    eur: float = Field(..., ge=0, description="Price in EUR")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: list[Any] | dict[str, Any] = Field(default_factory=list)
    request_id: str | None = Field(None, description="Request correlation ID")


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Product card details."""

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Name in the requested language")
    description: str = Field(default="", description="Description in the requested language")
    category: str | None = Field(None, description="Category tag")
    collections: list[str] = Field(default_factory=list, description="Collection slugs")
    price: PriceSchema = Field(..., description="Product price")
    stock_quantity: int = Field(..., ge=0, description="Units in stock")
    availability: AvailabilityBucket = Field(..., description="Stock level bucket")
    image_url: str | None = Field(None, description="Product image URL")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    sales_count: int = Field(default=0, ge=0, description="Units sold")
    avg_rating: float = Field(default=0.0, ge=0, description="Average rating")
    is_new: bool = Field(default=False, description="New arrival badge")
    is_bestseller: bool = Field(default=False, description="Bestseller badge")

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductSchema":
        """Create from a catalog record."""
        return cls(
            id=record.id,
            name=record.display_name,
            description=record.description,
            category=record.category,
            collections=sorted(record.collection_slugs),
            price=PriceSchema(
                pln=float(record.price_major), eur=float(record.price_secondary)
            ),
            stock_quantity=record.stock_quantity,
            availability=record.availability,
            image_url=record.image_url,
            created_at=record.created_at,
            sales_count=record.sales_count,
            avg_rating=record.avg_rating,
            is_new=record.is_new,
            is_bestseller=record.is_bestseller,
        )


class ProductListResponse(BaseModel):
    """Revealed slice of the filtered, sorted catalog."""

    items: list[ProductSchema] = Field(..., description="Revealed products")
    total: int = Field(..., ge=0, description="Products matching the filters")
    visible_count: int = Field(..., ge=0, description="Current reveal window size")
    has_more: bool = Field(..., description="Whether 'load more' should be shown")
    next_visible: int = Field(..., ge=0, description="Window size after one more reveal")
    sort: str = Field(..., description="Applied sort key")
    filters: dict[str, Any] = Field(default_factory=dict, description="Applied filters")

    @classmethod
    def from_view(
        cls, view: CatalogView, sort: str, filters: FilterState
    ) -> "ProductListResponse":
        """Create from a pipeline view."""
        return cls(
            items=[ProductSchema.from_record(p) for p in view.items],
            total=view.total,
            visible_count=view.visible_count,
            has_more=view.has_more,
            next_visible=view.next_visible,
            sort=sort,
            filters=filters.to_dict(),
        )


# ============================================================================
# Collection Schemas
# ============================================================================


class CollectionSchema(BaseModel):
    """Curated collection."""

    id: str = Field(..., description="Collection ID")
    slug: str = Field(..., description="URL slug")
    name: str = Field(..., description="Name in the requested language")
    description: str = Field(default="", description="Description in the requested language")
    image_url: str | None = Field(None, description="Cover image URL")
    featured: bool = Field(default=False, description="Highlighted on the collections page")
    product_count: int = Field(default=0, ge=0, description="Published products in the collection")

    @classmethod
    def from_record(
        cls, record: CollectionRecord, product_count: int = 0
    ) -> "CollectionSchema":
        """Create from a catalog record."""
        return cls(
            id=record.id,
            slug=record.slug,
            name=record.display_name,
            description=record.description,
            image_url=record.image_url,
            featured=record.featured,
            product_count=product_count,
        )


class CollectionListResponse(BaseModel):
    """Active collections in display order."""

    items: list[CollectionSchema]


# ============================================================================
# Facet Schemas
# ============================================================================


class PriceRangeSchema(BaseModel):
    """Inclusive PLN price range."""

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)


class FacetsResponse(BaseModel):
    """Filter panel options for the current catalog."""

    categories: list[str] = Field(default_factory=list)
    collections: list[str] = Field(default_factory=list)
    price_range: PriceRangeSchema
    availability: dict[str, int] = Field(default_factory=dict)
    total: int = Field(..., ge=0)
    default_filters: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_facets(
        cls, facets: CatalogFacets, defaults: FilterState
    ) -> "FacetsResponse":
        """Create from aggregated facets."""
        return cls(
            categories=facets.categories,
            collections=facets.collections,
            price_range=PriceRangeSchema(
                min=float(facets.min_price), max=float(facets.max_price)
            ),
            availability={b.value: n for b, n in facets.availability.items()},
            total=facets.total,
            default_filters=defaults.to_dict(),
        )


class RefreshResponse(BaseModel):
    """Result of reloading the catalog from the backend."""

    version: int
    product_count: int
    collection_count: int
