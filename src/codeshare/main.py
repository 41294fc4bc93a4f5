# src/codeshare/main.py
"""Main entry point for the Code Share application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from codeshare.api.v1 import (
    auth_router,
    posts_router,
    realtime_router,
    system_router,
)
from codeshare.core.errors import BoardError, PersistenceFailed, Unauthenticated
from codeshare.core.rate_limit import exempt_outside_api, limiter, visitor_key
from codeshare.core.settings import settings
from codeshare.services.store import STORE_BACKEND_DATABASE

logger = logging.getLogger(__name__)

_PERSISTENCE_RETRY_AFTER_SECONDS = "1"


def configure_logging() -> None:
    """Apply the configured log level to the root logger."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prepare storage before serving requests."""
    configure_logging()
    if settings.store_backend == STORE_BACKEND_DATABASE:
        from codeshare.db.session import create_tables

        create_tables()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info(
        "%s %s started (store=%s, realtime=%s)",
        settings.app_name,
        settings.app_version,
        settings.store_backend,
        settings.realtime_enabled,
    )
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Code Share API",
    description="Single-author code snippet board with realtime updates",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Per-visitor request limit on /api routes
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    """Report service errors as ``{"detail": ...}`` with their status code."""
    headers: dict[str, str] = {}
    if isinstance(exc, Unauthenticated):
        headers["WWW-Authenticate"] = "Bearer"
    elif isinstance(exc, PersistenceFailed):
        headers["Retry-After"] = _PERSISTENCE_RETRY_AFTER_SECONDS
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers or None,
    )


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 once a visitor exceeds the configured request limit."""
    logger.warning(
        "Rate limit %s exceeded by %s on %s",
        exc.detail,
        visitor_key(request),
        request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Too many requests, please try again later"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the caller."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(system_router, prefix="/api")
app.include_router(realtime_router, prefix="/api")

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Code Share API",
        "version": settings.app_version,
        "description": "Single-author code snippet board with realtime updates",
        "docs": "/docs",
        "realtime": "/api/ws",
    }


exempt_outside_api(app.routes)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("codeshare.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
