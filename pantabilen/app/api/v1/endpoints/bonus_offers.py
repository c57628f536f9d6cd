"""
Bonus Offer API Endpoints.

Promotional bonuses with an inclusive date window. Deleting an offer
deactivates it; the row is kept for the audit trail.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pantabilen.app.db.session import get_db, commit_or_raise
from pantabilen.app.core.exceptions import ResourceNotFoundError, ValidationError
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.domain.pricing.bonus_offers import active_offers
from pantabilen.app.models.bonus_offer import BonusOffer
from pantabilen.app.schemas.pricing import BonusOfferCreate, BonusOfferUpdate, BonusOfferResponse
from pantabilen.app.services.audit import log_tenant_action, AuditAction
from pantabilen.app.services.tenants import get_tenant_or_404

router = APIRouter(prefix="/tenants/{tenant_id}/bonus-offers", tags=["Tenant - Bonus Offers"])


async def get_offer_or_404(db: AsyncSession, tenant_id: int, offer_id: int) -> BonusOffer:
    offer = await db.get(BonusOffer, offer_id)
    if offer is None or offer.tenant_id != tenant_id:
        raise ResourceNotFoundError("Bonus offer", offer_id)
    return offer


@router.get("", response_model=List[BonusOfferResponse])
async def list_bonus_offers(
    tenant_id: int = Path(..., description="Tenant ID"),
    include_inactive: bool = Query(False, description="Include deactivated offers"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """List the tenant's bonus offers, newest first."""
    await get_tenant_or_404(db, tenant_id)
    query = select(BonusOffer).where(BonusOffer.tenant_id == tenant_id)
    if not include_inactive:
        query = query.where(BonusOffer.is_active == True)
    result = await db.execute(query.order_by(BonusOffer.created_at.desc(), BonusOffer.id.desc()))
    return [BonusOfferResponse.model_validate(offer) for offer in result.scalars().all()]


@router.get("/active", response_model=List[BonusOfferResponse])
async def list_active_bonus_offers(
    tenant_id: int = Path(..., description="Tenant ID"),
    as_of: Optional[date] = Query(None, description="Reference date, defaults to today"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Offers whose [start_date, end_date] window contains `as_of`."""
    await get_tenant_or_404(db, tenant_id)
    result = await db.execute(
        select(BonusOffer)
        .where(BonusOffer.tenant_id == tenant_id, BonusOffer.is_active == True)
        .order_by(BonusOffer.created_at.desc(), BonusOffer.id.desc())
    )
    offers = active_offers(result.scalars().all(), as_of or date.today())
    return [BonusOfferResponse.model_validate(offer) for offer in offers]


@router.post("", response_model=BonusOfferResponse, status_code=status.HTTP_201_CREATED)
async def create_bonus_offer(
    offer_data: BonusOfferCreate,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Create a bonus offer."""
    await get_tenant_or_404(db, tenant_id)
    offer = BonusOffer(tenant_id=tenant_id, is_active=True, **offer_data.model_dump())
    db.add(offer)
    await commit_or_raise(db, "Kunde inte spara bonuserbjudandet")
    await db.refresh(offer)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.BONUS_OFFER_CREATED,
        metadata={"offer_id": offer.id, "bonus_name": offer.bonus_name, "amount": offer.bonus_amount_sek}
    )
    return BonusOfferResponse.model_validate(offer)


@router.put("/{offer_id}", response_model=BonusOfferResponse)
async def update_bonus_offer(
    offer_data: BonusOfferUpdate,
    tenant_id: int = Path(..., description="Tenant ID"),
    offer_id: int = Path(..., description="Bonus offer ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Update a bonus offer. The resulting window must still satisfy start <= end."""
    offer = await get_offer_or_404(db, tenant_id, offer_id)
    changes = offer_data.model_dump(exclude_unset=True)
    
    start_date = changes.get("start_date", offer.start_date)
    end_date = changes.get("end_date", offer.end_date)
    if end_date < start_date:
        raise ValidationError(
            "Slutdatum kan inte vara före startdatum",
            details={"start_date": str(start_date), "end_date": str(end_date)}
        )
    
    for field, value in changes.items():
        setattr(offer, field, value)
    await commit_or_raise(db, "Kunde inte spara bonuserbjudandet")
    await db.refresh(offer)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.BONUS_OFFER_UPDATED,
        metadata={"offer_id": offer.id, "changes": list(changes)}
    )
    return BonusOfferResponse.model_validate(offer)


@router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_bonus_offer(
    tenant_id: int = Path(..., description="Tenant ID"),
    offer_id: int = Path(..., description="Bonus offer ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a bonus offer (soft delete)."""
    offer = await get_offer_or_404(db, tenant_id, offer_id)
    offer.is_active = False
    await commit_or_raise(db, "Kunde inte inaktivera bonuserbjudandet")
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.BONUS_OFFER_DEACTIVATED,
        metadata={"offer_id": offer_id}
    )
