"""Stockroom API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.attributes import router as attributes_router
from app.api.categories import router as categories_router
from app.api.health import router as health_router
from app.api.middleware import setup_middleware
from app.api.poms import router as poms_router
from app.api.skus import router as skus_router
from app.api.vocabularies import router as vocabularies_router
from app.catalog.bootstrap import bootstrap_taxonomy
from app.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    PartialBatchFailureError,
    ValidationError,
)
from app.infrastructure.config import settings
from app.infrastructure.database import async_session_factory
from app.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting Stockroom API",
        version=settings.api_version,
        debug=settings.debug,
    )

    if settings.bootstrap_on_startup:
        async with async_session_factory() as session:
            await bootstrap_taxonomy(session)

    yield

    # Shutdown
    logger.info("Shutting down Stockroom API")


app = FastAPI(
    title="Stockroom API",
    description="Product taxonomy and SKU materialization backend",
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

# Request ID and log context
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(attributes_router)
app.include_router(vocabularies_router)
app.include_router(skus_router)
app.include_router(poms_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def domain_error_status(exc: DomainError) -> int:
    """Map a domain error kind to its HTTP status code."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, PartialBatchFailureError):
        return status.HTTP_207_MULTI_STATUS
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render domain errors in the standard error format."""
    request_id = getattr(request.state, "request_id", None)
    status_code = domain_error_status(exc)

    logger.info(
        "Domain error",
        path=request.url.path,
        method=request.method,
        error_code=exc.error_code,
        status_code=status_code,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    # Extract error details from exception
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
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )
