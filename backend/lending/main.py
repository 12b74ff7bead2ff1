"""
Item Lending API - Main Application Entry Point

Peer-to-peer item lending:
- Owners list items, other users request time-bounded bookings
- Owners approve or reject WAITING bookings exactly once
- Bookers and owners list bookings by state (ALL/CURRENT/PAST/FUTURE/WAITING/REJECTED)
- Users post item requests that owners answer by listing an item
- Owners see the last and next approved booking of each item
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from lending.api.errors import register_error_handlers
from lending.api.middleware import RequestLoggingMiddleware
from lending.api.router import api_router
from lending.core.config import get_settings
from lending.core.logging import get_logger, setup_logging
from lending.core.metrics import metrics_endpoint
from lending.services.cache_service import close_redis, get_cache_stats, get_redis

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if await get_redis():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Serving booking lists without cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Item lending API with a single-transition booking approval workflow",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
