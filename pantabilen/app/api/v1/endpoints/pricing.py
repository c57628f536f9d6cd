"""
Pricing Settings & Quote API Endpoints.

Tenant admins edit the pricing settings blob (whole or one section at a
time) and request quotes computed from settings, distance rules and the
currently active bonus offers.
"""

from datetime import date
from typing import Any, Dict
from fastapi import APIRouter, Depends, Path
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pantabilen.app.db.session import get_db
from pantabilen.app.core.exceptions import ResourceNotFoundError, ValidationError
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.domain.pricing.bonus_offers import active_offers, latest_active_offer
from pantabilen.app.domain.pricing.calculator import (
    VehicleProfile, compute_deduction, vehicle_age_from_year
)
from pantabilen.app.domain.pricing.distance_rules import find_matching_rule
from pantabilen.app.domain.pricing.settings import PricingSettings
from pantabilen.app.models.bonus_offer import BonusOffer
from pantabilen.app.models.enums import FuelType
from pantabilen.app.schemas.pricing import (
    QuoteRequest, QuoteResponse, PriceBreakdownResponse, BonusOfferResponse
)
from pantabilen.app.services.audit import log_tenant_action, AuditAction
from pantabilen.app.services.pricing_cache import PricingSettingsCache, get_pricing_cache
from pantabilen.app.services.pricing_settings_store import PricingSettingsStore
from pantabilen.app.services.tenants import get_tenant_or_404
from pantabilen.app.api.v1.endpoints.distance_rules import load_rules

router = APIRouter(prefix="/tenants/{tenant_id}/pricing", tags=["Tenant - Pricing"])


@router.get("/settings")
async def get_pricing_settings(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db),
    cache: PricingSettingsCache = Depends(get_pricing_cache)
) -> Dict[str, Any]:
    """Return the tenant's pricing settings (platform defaults until first save)."""
    await get_tenant_or_404(db, tenant_id)
    pricing = await PricingSettingsStore(db, cache).load(tenant_id)
    return pricing.to_blob()


@router.put("/settings")
async def save_pricing_settings(
    pricing: PricingSettings,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db),
    cache: PricingSettingsCache = Depends(get_pricing_cache)
) -> Dict[str, Any]:
    """Replace the whole settings blob. Values outside their ranges are rejected with 422."""
    await get_tenant_or_404(db, tenant_id)
    await PricingSettingsStore(db, cache).save(tenant_id, pricing, updated_by=current_user.get("user_id"))
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.PRICING_SETTINGS_SAVED,
        metadata={"sections": list(pricing.to_blob())}
    )
    return pricing.to_blob()


@router.post("/settings/reset")
async def reset_pricing_settings(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db),
    cache: PricingSettingsCache = Depends(get_pricing_cache)
) -> Dict[str, Any]:
    """Restore the platform default settings."""
    await get_tenant_or_404(db, tenant_id)
    pricing = await PricingSettingsStore(db, cache).reset(tenant_id, updated_by=current_user.get("user_id"))
    
    await log_tenant_action(db, current_user, tenant_id, AuditAction.PRICING_SETTINGS_RESET)
    return pricing.to_blob()


@router.put("/settings/{section}")
async def save_pricing_section(
    values: Dict[str, Any],
    tenant_id: int = Path(..., description="Tenant ID"),
    section: str = Path(..., description="Settings section, e.g. age_bonuses"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db),
    cache: PricingSettingsCache = Depends(get_pricing_cache)
) -> Dict[str, Any]:
    """
    Update one section of the settings. Keys left out keep their saved
    value; other sections are untouched.
    
    Unknown sections are 404; out-of-range values are 422.
    """
    await get_tenant_or_404(db, tenant_id)
    store = PricingSettingsStore(db, cache)
    current = await store.load(tenant_id)
    
    try:
        pricing = current.with_section(section, values)
    except KeyError:
        raise ResourceNotFoundError("Pricing section", section)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Kontrollera att alla värden är inom tillåtna intervall.",
            details={"section": section, "errors": exc.errors(include_url=False, include_context=False)}
        )
    
    await store.save(tenant_id, pricing, updated_by=current_user.get("user_id"))
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.PRICING_SETTINGS_SAVED,
        metadata={"sections": [section]}
    )
    return pricing.to_blob()


@router.post("/quote", response_model=QuoteResponse)
async def quote_price(
    quote: QuoteRequest,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db),
    cache: PricingSettingsCache = Depends(get_pricing_cache)
):
    """
    Price delta for a vehicle.
    
    Sums age bonus, old-car deduction, distance adjustment, matching
    distance rule (pickups only), parts bonuses and fuel adjustment.
    Active bonus offers are listed alongside (the newest one featured);
    they are not added to the total.
    """
    await get_tenant_or_404(db, tenant_id)
    as_of = quote.as_of or date.today()
    pricing = await PricingSettingsStore(db, cache).load(tenant_id)
    rules = await load_rules(db, tenant_id)
    
    vehicle = VehicleProfile(
        vehicle_age_years=(
            quote.vehicle_age_years
            if quote.vehicle_age_years is not None
            else vehicle_age_from_year(quote.vehicle_year, as_of)
        ),
        vehicle_year=quote.vehicle_year,
        fuel_type=FuelType.from_label(quote.fuel_type),
        is_dropoff=quote.is_dropoff,
        is_complete=quote.is_complete,
        pickup_distance_km=quote.pickup_distance_km,
        has_engine_transmission_catalyst=quote.has_engine_transmission_catalyst,
        has_battery_wheels_other=quote.has_battery_wheels_other,
    )
    breakdown = compute_deduction(vehicle, pricing, rules)
    
    matched = None
    if not vehicle.is_dropoff:
        matched = find_matching_rule(rules, vehicle.pickup_distance_km)
    
    result = await db.execute(
        select(BonusOffer)
        .where(BonusOffer.tenant_id == tenant_id, BonusOffer.is_active == True)
        .order_by(BonusOffer.created_at.desc(), BonusOffer.id.desc())
    )
    offers = active_offers(result.scalars().all(), as_of)
    featured = latest_active_offer(offers, as_of)
    
    return QuoteResponse(
        tenant_id=tenant_id,
        vehicle_age_years=vehicle.vehicle_age_years,
        fuel_type=vehicle.fuel_type,
        total=breakdown.total,
        breakdown=PriceBreakdownResponse(**breakdown.as_dict()["breakdown"]),
        matched_distance_rule_id=matched.id if matched else None,
        active_offers=[BonusOfferResponse.model_validate(offer) for offer in offers],
        featured_offer=BonusOfferResponse.model_validate(featured) if featured else None,
    )
