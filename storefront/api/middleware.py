"""API middleware for the Storefront.

Every request is tagged with a correlation ID, the display language it asked
for and the catalog snapshot version it was served from. All three are bound
into the structlog context, so pipeline and store logs emitted while handling
the request carry them too.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.catalog.records import Language
from storefront.catalog.store import get_catalog_store
from storefront.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
CATALOG_VERSION_HEADER = "X-Catalog-Version"


def _request_language(request: Request) -> str:
    """Display language requested via ``?lang=``, else the default."""
    lang = request.query_params.get("lang")
    if lang in {language.value for language in Language}:
        return lang
    return settings.default_language


# ============================================================================
# Request Context Middleware
# ============================================================================


class CatalogContextMiddleware(BaseHTTPMiddleware):
    """Bind request ID, language and catalog version to the request.

    The snapshot version is read once, before the handler runs; a refresh
    completing mid-request does not change the version reported for it.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        catalog_version = get_catalog_store(
            seed_sample=settings.seed_sample_catalog
        ).version
        request.state.request_id = request_id
        request.state.catalog_version = catalog_version
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            lang=_request_language(request),
            catalog_version=catalog_version,
        )

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars(
                "request_id", "lang", "catalog_version"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CATALOG_VERSION_HEADER] = str(catalog_version)
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into a 500 ``INTERNAL_ERROR`` body."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": getattr(request.state, "request_id", None),
                },
            )


def setup_middleware(app: FastAPI) -> None:
    """Configure storefront middleware.

    The last middleware added runs outermost. ``CatalogContextMiddleware``
    wraps ``ErrorHandlerMiddleware`` so 500 responses still get the
    correlation headers.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(CatalogContextMiddleware)
