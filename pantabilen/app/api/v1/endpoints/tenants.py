"""
Super Admin Tenant API Endpoints.

Registers scrapyards on the platform.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from pantabilen.app.db.session import get_db
from pantabilen.app.models.tenant import Tenant
from pantabilen.app.models.enums import UserRole
from pantabilen.app.schemas.tenant import TenantCreate, TenantResponse
from pantabilen.app.core.guards import require_role
from pantabilen.app.services.audit import log_tenant_action, AuditAction

router = APIRouter(prefix="/admin", tags=["Super Admin - Tenants"])


@router.post("/tenants", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    tenant_data: TenantCreate,
    current_user: dict = Depends(require_role([UserRole.SUPER_ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Register a new tenant (Super Admin only)."""
    tenant = Tenant(
        name=tenant_data.name,
        country=tenant_data.country,
        base_address=tenant_data.base_address,
        is_active=True
    )
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    
    await log_tenant_action(
        db, current_user, tenant.id, AuditAction.TENANT_CREATED,
        metadata={"name": tenant.name, "country": tenant.country}
    )
    
    return TenantResponse.model_validate(tenant)


@router.get("/tenants", response_model=List[TenantResponse])
async def list_tenants(
    current_user: dict = Depends(require_role([UserRole.SUPER_ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """List all tenants (Super Admin only)."""
    result = await db.execute(select(Tenant).order_by(Tenant.id))
    return [TenantResponse.model_validate(tenant) for tenant in result.scalars().all()]
