"""
FastAPI Application Entry Point.

This is the main application file for the Panta Bilen backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pantabilen.app.core.config import settings
from pantabilen.app.api.v1.router import router as api_v1_router
from pantabilen.app.core.observability import ObservabilityMiddleware, configure_logging, logger
from pantabilen.app.core.redis_client import ping_redis, close_redis
from pantabilen.app.db.session import engine, Base
from pantabilen.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from pantabilen.app.models.tenant import Tenant
from pantabilen.app.models.audit_log import AuditLog
from pantabilen.app.models.distance_rule import DistanceRule
from pantabilen.app.models.bonus_offer import BonusOffer
from pantabilen.app.models.pricing_settings import TenantPricingSettings
from pantabilen.app.models.postal_code import PostalCode, TenantCoverageArea
from pantabilen.app.models.pickup import CustomerRequest, PickupOrder
from pantabilen.app.models.driver import Driver, DriverAssignment


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    1. Configures logging.
    2. Creates database tables on startup.
    3. Closes the database and Redis pools on shutdown.
    """
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await close_redis()
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Multi-tenant backend for vehicle scrap pickups: pricing, coverage and pickup scheduling",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    
    Redis being down is reported but does not make the service unhealthy;
    pricing falls back to the database.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await ping_redis() else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.
    
    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Panta Bilen Backend API",
        "docs": "/docs",
        "health": "/health",
    }
