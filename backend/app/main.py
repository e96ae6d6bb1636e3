"""
Video Link Resolver - FastAPI Application Entry Point.

This module initializes the FastAPI application:

- Lifespan handler that configures logging from settings
- CORS middleware for browser clients and media players
- Request logging middleware adding X-Request-ID and X-Process-Time
- API router registration under the /api/v1 prefix
- Root and health endpoints for monitoring
- Envelope-shaped 404 and 500 handlers

API Structure:
    /api/v1/video/resolve   - Share text to canonical content item
    /api/v1/video/proxy     - Media relay with anti-hotlink headers
    /api/v1/video/download  - Media relay as file attachment

Usage:
    # Run with uvicorn directly (from the backend/ directory)
    uvicorn app.main:app --host 0.0.0.0 --port 8000 --reload

    # Run as Python module
    python -m app.main
"""

import logging
import time
import uuid

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import uvicorn

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.api.v1 import api_router
from app.config import get_settings
from app.utils.logger import setup_logging


# Configure module logger
logger = logging.getLogger(__name__)

# HTTP status code constants
HTTP_ERROR_THRESHOLD = 400  # Status codes >= 400 indicate errors


# =============================================================================
# Application Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Configure logging on startup and log the effective configuration.

    The service holds no connections or caches across requests, so shutdown
    only logs.
    """
    settings = get_settings()

    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} starting")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug Mode: {settings.debug}")
    logger.info(f"Strategies: {', '.join(settings.enabled_strategies)}")
    logger.info(
        f"Timeouts: request={settings.request_timeout_seconds}s, "
        f"resolve={settings.resolve_timeout_seconds}s"
    )

    yield

    logger.info(f"{settings.app_name} shutdown complete")


# =============================================================================
# FastAPI Application Instance
# =============================================================================

_settings = get_settings()

app = FastAPI(
    title="Video Link Resolver API",
    description=(
        "Resolves short-video share links (Douyin, Kuaishou, Xiaohongshu, TikTok) "
        "to watermark-free video URLs or image galleries, and relays media past "
        "anti-hotlink checks."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=_settings.debug,
)


# =============================================================================
# Middleware Configuration
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials="*" not in _settings.cors_origins,
    allow_methods=["GET", "HEAD", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[
        "X-Request-ID",
        "X-Process-Time",
        "Content-Length",
        "Content-Range",
        "Accept-Ranges",
    ],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    """
    Log each request with its status and timing.

    Reuses an inbound X-Request-ID when present, otherwise generates one, and
    adds X-Request-ID and X-Process-Time to the response.
    """
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    start_time = time.perf_counter()

    logger.debug(f"Request started: {request.method} {request.url.path} [Request-ID: {request_id}]")

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Request failed: %s %s [Request-ID: %s]",
            request.method,
            request.url.path,
            request_id,
        )
        raise

    process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

    response.headers["X-Process-Time"] = f"{process_time_ms}ms"
    response.headers["X-Request-ID"] = request_id

    log_level = logging.INFO if response.status_code < HTTP_ERROR_THRESHOLD else logging.WARNING
    logger.log(
        log_level,
        f"Request completed: {request.method} {request.url.path} "
        f"[Status: {response.status_code}] [Time: {process_time_ms}ms] "
        f"[Request-ID: {request_id}]",
    )

    return response


# =============================================================================
# API Router Registration
# =============================================================================

app.include_router(api_router, prefix="/api/v1")


# =============================================================================
# Core Endpoints
# =============================================================================


@app.get("/", tags=["root"], summary="API Root")
async def root() -> dict[str, Any]:
    """Service name, version and entry points."""
    return {
        "name": "Video Link Resolver API",
        "version": __version__,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json",
        },
        "api_prefix": "/api/v1",
        "endpoints": {
            "resolve": "/api/v1/video/resolve",
            "proxy": "/api/v1/video/proxy",
            "download": "/api/v1/video/download",
        },
    }


@app.get("/health", tags=["health"], summary="Health Check")
async def health_check() -> dict[str, Any]:
    """
    Liveness probe for load balancers and container orchestrators.

    The service has no backing stores, so being able to answer is healthy.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
        "service": _settings.app_name,
    }


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(404)
async def not_found_handler(request: Request, _exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": f"The requested path '{request.url.path}' was not found",
        },
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the error and return a generic envelope without internal details."""
    logger.error(
        f"Internal server error on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "服务器内部错误，请稍后重试"},
    )


# =============================================================================
# Main Execution Block
# =============================================================================

if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level,
        access_log=settings.debug,
    )
