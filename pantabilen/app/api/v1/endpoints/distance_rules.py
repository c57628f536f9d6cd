"""
Distance Rule API Endpoints.

Tenant admins manage distance-based deductions. Every create/update is
validated for range and overlap before it is persisted.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pantabilen.app.db.session import get_db, commit_or_raise
from pantabilen.app.core.exceptions import ResourceNotFoundError
from pantabilen.app.core.guards import tenant_guard
from pantabilen.app.domain.pricing.distance_rules import (
    RuleCandidate, validate_distance_rule, format_distance_range
)
from pantabilen.app.models.distance_rule import DistanceRule
from pantabilen.app.schemas.pricing import DistanceRuleCreate, DistanceRuleResponse
from pantabilen.app.services.audit import log_tenant_action, AuditAction
from pantabilen.app.services.tenants import get_tenant_or_404

router = APIRouter(prefix="/tenants/{tenant_id}/distance-rules", tags=["Tenant - Distance Rules"])


def to_response(rule: DistanceRule) -> DistanceRuleResponse:
    return DistanceRuleResponse(
        id=rule.id,
        tenant_id=rule.tenant_id,
        min_distance_km=rule.min_distance_km,
        max_distance_km=rule.max_distance_km,
        deduction_sek=rule.deduction_sek,
        range_label=format_distance_range(rule),
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )


async def load_rules(db: AsyncSession, tenant_id: int) -> List[DistanceRule]:
    result = await db.execute(
        select(DistanceRule)
        .where(DistanceRule.tenant_id == tenant_id)
        .order_by(DistanceRule.min_distance_km)
    )
    return list(result.scalars().all())


async def get_rule_or_404(db: AsyncSession, tenant_id: int, rule_id: int) -> DistanceRule:
    rule = await db.get(DistanceRule, rule_id)
    if rule is None or rule.tenant_id != tenant_id:
        raise ResourceNotFoundError("Distance rule", rule_id)
    return rule


@router.get("", response_model=List[DistanceRuleResponse])
async def list_distance_rules(
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """List the tenant's distance rules ordered by minimum distance."""
    await get_tenant_or_404(db, tenant_id)
    return [to_response(rule) for rule in await load_rules(db, tenant_id)]


@router.post("", response_model=DistanceRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_distance_rule(
    rule_data: DistanceRuleCreate,
    tenant_id: int = Path(..., description="Tenant ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a distance rule.
    
    Rejects negative minimums, max <= min, positive deductions (422) and
    ranges overlapping an existing rule (409).
    """
    await get_tenant_or_404(db, tenant_id)
    candidate = RuleCandidate(tenant_id=tenant_id, **rule_data.model_dump())
    validate_distance_rule(candidate, await load_rules(db, tenant_id))
    
    rule = DistanceRule(tenant_id=tenant_id, **rule_data.model_dump())
    db.add(rule)
    await commit_or_raise(db, "Kunde inte spara avståndsregeln")
    await db.refresh(rule)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DISTANCE_RULE_CREATED,
        metadata={"rule_id": rule.id, "range": format_distance_range(rule), "deduction_sek": rule.deduction_sek}
    )
    
    return to_response(rule)


@router.put("/{rule_id}", response_model=DistanceRuleResponse)
async def update_distance_rule(
    rule_data: DistanceRuleCreate,
    tenant_id: int = Path(..., description="Tenant ID"),
    rule_id: int = Path(..., description="Distance rule ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Replace a distance rule in place (the rule itself is excluded from the overlap check)."""
    rule = await get_rule_or_404(db, tenant_id, rule_id)
    candidate = RuleCandidate(tenant_id=tenant_id, id=rule_id, **rule_data.model_dump())
    validate_distance_rule(candidate, await load_rules(db, tenant_id), exclude_id=rule_id)
    
    rule.min_distance_km = rule_data.min_distance_km
    rule.max_distance_km = rule_data.max_distance_km
    rule.deduction_sek = rule_data.deduction_sek
    await commit_or_raise(db, "Kunde inte spara avståndsregeln")
    await db.refresh(rule)
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DISTANCE_RULE_UPDATED,
        metadata={"rule_id": rule.id, "range": format_distance_range(rule), "deduction_sek": rule.deduction_sek}
    )
    
    return to_response(rule)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_distance_rule(
    tenant_id: int = Path(..., description="Tenant ID"),
    rule_id: int = Path(..., description="Distance rule ID"),
    current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Delete a distance rule."""
    rule = await get_rule_or_404(db, tenant_id, rule_id)
    label = format_distance_range(rule)
    await db.delete(rule)
    await commit_or_raise(db, "Kunde inte ta bort avståndsregeln")
    
    await log_tenant_action(
        db, current_user, tenant_id, AuditAction.DISTANCE_RULE_DELETED,
        metadata={"rule_id": rule_id, "range": label}
    )
