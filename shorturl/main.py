"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures exception handlers and startup/shutdown wiring.
"""

import os
import uuid

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shorturl.api import api_router
from shorturl.api.dependencies import build_services
from shorturl.api.schemas import APIResult
from shorturl.core.config import settings
from shorturl.core.logging import setup_logging
from shorturl.core.redis import redis_manager
from shorturl.db.base import init_models

# Ensure logs directory exists
os.makedirs(settings.LOG_DIR, exist_ok=True)

# Setup logging
logger = setup_logging()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# Include API router
app.include_router(api_router)


# Add exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors inside the response envelope."""
    logger.warning(f"Request validation error on {request.method} {request.url.path}: {exc.errors()}")
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=APIResult.error(message).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to catch and log all unhandled exceptions."""
    error_id = f"error-{uuid.uuid4().hex[:12]}"

    logger.bind(
        error_id=error_id,
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None
    ).opt(exception=exc).error(f"Unhandled exception in {request.method} {request.url.path}")

    message = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=APIResult.error(f"{message} ({error_id})").model_dump()
    )


# Add startup and shutdown event handlers
@app.on_event("startup")
async def startup_event():
    """Run startup tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await init_models()

    if redis_manager.is_enabled:
        # Redis-backed components degrade per call and recover once Redis is back
        if await redis_manager.ping():
            logger.info("Connected to Redis")
        else:
            logger.warning("Redis unreachable at startup, cache tier degraded until it returns")
        app.state.services = build_services(await redis_manager.get_client())
    else:
        logger.warning("Cache disabled, running in single-instance mode")
        app.state.services = build_services()
        await app.state.services.resolution.seed_collision_filter()


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks."""
    logger.info(f"Shutting down {settings.APP_NAME}")

    services = getattr(app.state, "services", None)
    if services is not None:
        await services.resolution.drain()

    await redis_manager.close()
