"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from storefront.catalog.store import get_catalog_store
from storefront.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness response schema."""

    status: str
    catalog_version: int
    product_count: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="storefront",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if a catalog snapshot has been loaded.

    Returns:
        Readiness status with catalog snapshot info.
    """
    stats = get_catalog_store(seed_sample=settings.seed_sample_catalog).stats()
    return ReadinessResponse(
        status="ready" if stats["version"] > 0 else "loading",
        catalog_version=stats["version"],
        product_count=stats["product_count"],
    )
