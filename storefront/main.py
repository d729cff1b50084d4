"""Storefront API main application module.

This module initializes the FastAPI application and configures
logging, middleware, routers, and startup/shutdown events.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api import catalog_router, health_router
from storefront.api.middleware import setup_middleware
from storefront.catalog.remote import RestCatalogSource, refresh_store
from storefront.catalog.store import get_catalog_store
from storefront.config import settings
from storefront.exceptions import (
    CatalogSourceError,
    CollectionNotFoundError,
    ProductNotFoundError,
    RemoteSourceDisabledError,
    StorefrontError,
)


# ============================================================================
# Logging
# ============================================================================


def configure_logging(level: str = settings.log_level) -> None:
    """Configure structlog to render JSON through the stdlib logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger()


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Loads the initial catalog snapshot: the sample catalog when seeding is
    enabled, then the hosted backend when one is configured. A backend
    failure at startup is logged and the service starts with what it has.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Storefront API",
        version=settings.api_version,
        debug=settings.debug,
        seed_sample_catalog=settings.seed_sample_catalog,
    )

    store = get_catalog_store(seed_sample=settings.seed_sample_catalog)

    if settings.backend_url:
        source = RestCatalogSource(
            base_url=settings.backend_url,
            api_key=settings.backend_api_key,
            timeout=settings.backend_timeout,
        )
        try:
            await refresh_store(store, source)
        except CatalogSourceError as e:
            logger.warning("Initial catalog load failed", error=e.message)
        finally:
            await source.close()

    logger.info("Catalog ready", **store.stats())

    yield

    logger.info("Shutting down Storefront API")


app = FastAPI(
    title="Storefront API",
    description="Candle storefront catalog: shop grid, collections and filters",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================

# exception type -> (status code, error code)
ERROR_STATUS: dict[type[StorefrontError], tuple[int, str]] = {
    ProductNotFoundError: (status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND"),
    CollectionNotFoundError: (status.HTTP_404_NOT_FOUND, "COLLECTION_NOT_FOUND"),
    CatalogSourceError: (status.HTTP_502_BAD_GATEWAY, "CATALOG_SOURCE_ERROR"),
    RemoteSourceDisabledError: (status.HTTP_409_CONFLICT, "REMOTE_SOURCE_DISABLED"),
}


@app.exception_handler(StorefrontError)
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    """Map storefront errors to the standard error body."""
    status_code, error_code = ERROR_STATUS.get(
        type(exc), (status.HTTP_400_BAD_REQUEST, "STOREFRONT_ERROR")
    )
    logger.warning(
        "Request failed",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": exc.details,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )
