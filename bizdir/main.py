"""FastAPI application entry point for Bizdir."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from bizdir import __version__
from bizdir.config import settings
from bizdir.routers import auth, businesses, export, import_router
from bizdir.services.record_store import StoreSelection, select_record_store

logger = logging.getLogger(__name__)

# Rate limiter configuration
limiter = Limiter(key_func=get_remote_address)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'; base-uri 'none';"
        )

        # HTTPS enforcement header (browsers will upgrade to HTTPS)
        if settings.enforce_https:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )

        return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 rather than 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors and answer with a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(selection: StoreSelection | None = None) -> FastAPI:
    """Build the application.

    Args:
        selection: Storage decision to use instead of probing the configured
            database at startup (for testing).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        # Startup
        if selection is not None:
            app.state.store_selection = selection
        else:
            app.state.store_selection = await select_record_store(settings.config.database)
        logger.info("Storage mode: %s", app.state.store_selection.mode.value)

        yield

        # Shutdown
        if selection is None:
            app.state.store_selection.close()

    app = FastAPI(
        title=settings.app_name,
        description="Business contact directory with spreadsheet import and export",
        version=__version__,
        lifespan=lifespan,
    )
    # Available before the lifespan runs, e.g. under a bare ASGI transport
    if selection is not None:
        app.state.store_selection = selection

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Only allow origins from the whitelist; empty list means same-origin only
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["Authorization", "Content-Type"],
            expose_headers=["Content-Disposition"],
            max_age=600,  # Cache preflight for 10 minutes
        )

    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint, including the storage mode in use."""
        current = getattr(request.app.state, "store_selection", None)
        return JSONResponse(
            content={
                "status": "healthy",
                "version": __version__,
                "app_name": settings.app_name,
                "storage_mode": current.mode.value if current else None,
            }
        )

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(businesses.router, prefix="/api/businesses", tags=["Businesses"])
    app.include_router(import_router.router, prefix="/api/import", tags=["Import"])
    app.include_router(export.router, prefix="/api/export", tags=["Export"])

    return app


app = create_app()
