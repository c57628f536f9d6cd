"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from pantabilen.app.api.v1.endpoints import (
    tenants, distance_rules, pricing, bonus_offers,
    coverage, drivers, pickups
)

router = APIRouter()

# Super admin endpoints
router.include_router(tenants.router)

# Pricing configuration
router.include_router(distance_rules.router)
router.include_router(pricing.router)
router.include_router(bonus_offers.router)

# Service area
router.include_router(coverage.router)

# Fleet and pickups
router.include_router(drivers.router)
router.include_router(pickups.router)
